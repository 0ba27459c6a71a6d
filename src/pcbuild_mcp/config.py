"""Configuration for PC Build MCP server."""

import os

# Server settings
HTTP_PORT = int(os.getenv("HTTP_PORT", "8080"))
RATE_LIMIT_REQUESTS = int(os.getenv("RATE_LIMIT_REQUESTS", "100"))

# Request limits
MAX_LISTINGS_PER_REQUEST = int(os.getenv("MAX_LISTINGS_PER_REQUEST", "200"))
MAX_TEXT_LENGTH = 20_000  # Listing title+description beyond this is truncated before extraction

# Spec cache settings (keyed by category + listing id)
SPEC_CACHE_TTL = int(os.getenv("SPEC_CACHE_TTL", "3600"))
SPEC_CACHE_MAX_SIZE = int(os.getenv("SPEC_CACHE_MAX_SIZE", "5000"))

# Power budget estimate (whole build)
BASE_SYSTEM_WATTS = 100  # Motherboard, RAM, storage, fans
DEFAULT_CPU_TDP = 125  # Used when the CPU listing publishes no TDP
DEFAULT_GPU_WATTS = 200  # Used when the GPU listing publishes no recommended PSU
PSU_HEADROOM = 1.2

# Plausibility bounds for numbers pulled out of free text
GPU_PSU_MIN_WATTS = 300
GPU_PSU_MAX_WATTS = 2000
GPU_LENGTH_RANGE = (150, 450)
CASE_GPU_LENGTH_RANGE = (150, 500)
CASE_COOLER_HEIGHT_RANGE = (50, 250)
