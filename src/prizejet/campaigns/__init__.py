"""Campaign authoring, publishing and dashboards."""
