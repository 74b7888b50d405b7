"""Rate feed ingestion: models, the currency-api client and the rate resolver."""
