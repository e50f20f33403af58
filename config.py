"""
ARNav session driver configuration.
"""

# Routing service
ROUTING_CONFIG = {
    "base_url": "http://127.0.0.1:8080",
    "route_path": "/route",
    "timeout_s": 10.0,
}

# Session lifecycle
SESSION_CONFIG = {
    "permission_grace_s": 3.0,     # wait after a permission request
    "poll_interval_s": 0.05,       # background task polling
    "settle_time_s": 3.0,          # geospatial enablement warm-up
    "anchor_altitude_offset_m": 0.5,
}

# Localization
LOCALIZATION_CONFIG = {
    "timeout_s": 180.0,                 # advisory localization timeout
    "max_horizontal_accuracy_m": 20.0,
    "max_yaw_accuracy_deg": 25.0,
}

# Logging
LOGGING_CONFIG = {
    "level": "INFO",
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}

# Virtual device (for testing without AR hardware)
SIMULATION_CONFIG = {
    "base_lat": 22.2900,
    "base_lon": 114.1700,
    "base_alt": 2.0,
    "init_time_s": 0.5,
    "earth_warmup_s": 1.0,
    "convergence_s": 5.0,
    "route_latency_s": 0.2,
    # destination id -> [(name, east_m, north_m), ...]
    "destinations": {
        1: [("Pier entrance", 0.0, 15.0), ("Boathouse", 12.0, 30.0), ("Start line", 25.0, 30.0)],
        2: [("Cafe", -20.0, 5.0), ("Car park", -40.0, -10.0)],
    },
}
