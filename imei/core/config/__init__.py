"""Configuration loading: CLI options, environment and ``imei.yml``."""
