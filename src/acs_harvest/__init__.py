# ABOUTME: ACS Harvest builds a dataset of Anomaly Classification System data from the SCP wiki
# ABOUTME: Catalog, backlink discovery, concurrent harvesting, reconciliation and sorting

__version__ = "0.1.0"
