"""
Time-series storage and aggregation for groundwater monitoring stations.

Modules:
    models       — Station, Reading, Bucket and result types
    store        — station directory + copy-on-write reading store
    ingest       — per-item validation of incoming readings
    aggregator   — daily / weekly bucketing and range statistics
    classifier   — threshold-based status
    dashboard    — cross-station snapshot and rolling trend
    sample_data  — deterministic demo stations and readings
"""
