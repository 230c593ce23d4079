"""Service dependencies shared by the routers."""

from fastapi import Depends

from prizejet.auth.middleware import get_db
from prizejet.campaigns.service import CampaignService
from prizejet.entries.service import EntryService
from prizejet.storage.db import Database


def get_campaign_service(db: Database = Depends(get_db)) -> CampaignService:
    return CampaignService(db)


def get_entry_service(db: Database = Depends(get_db)) -> EntryService:
    return EntryService(db)
