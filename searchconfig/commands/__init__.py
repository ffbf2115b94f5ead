"""Click commands for searchconfig."""
