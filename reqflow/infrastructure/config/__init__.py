"""Configuration loading (YAML, .env, environment) and the orchestration config."""
