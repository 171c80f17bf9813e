"""Work session engine: git capture, session state and branch aggregation."""
