"""
Location acquisition demo configuration.
"""

# Acquisition thresholds and timeouts (see locfix_core.config.AcquisitionConfig)
ACQUISITION_CONFIG = {
    "max_distance_km": 10.0,             # Max distance from last known location (km)
    "accuracy_threshold_m": 100.0,       # Max accepted accuracy radius (m)
    "gps_timeout_ms": 30000,             # GPS budget and overall race deadline
    "network_timeout_ms": 15000,         # Network provider budget
    "recency_threshold_ms": 30000,       # Max age of an accepted fix
    "last_known_location_age_ms": 600000,  # Max age of last known location (10 min)
    "proximity_threshold_m": 1000.0,     # Max distance from reference location (m)
    "stale_reference_policy": "fail",    # "fail" or "skip"
}

# Logging configuration
LOGGING_CONFIG = {
    "level": "INFO",
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}

# Simulated sources (for the demo)
SIMULATION_CONFIG = {
    "base_lat": 28.6139,
    "base_lon": 77.2090,
    "gps_delay_ms": 2000,
    "network_delay_ms": 800,
    "fused_delay_ms": 50,
    "gps_accuracy_m": 10.0,
    "network_accuracy_m": 40.0,
    "fused_accuracy_m": 50.0,
    "stale_fix_age_ms": 20 * 60 * 1000,  # Fused fix 20 minutes old
    "gps_disable_after_ms": 500,
    "time_scale": 0.01,                  # Scale delays and timeouts for quick runs
}
