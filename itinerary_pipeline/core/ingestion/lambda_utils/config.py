"""
Configuration and secrets management utilities for Lambda.
"""

import json
import logging
import os

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from itinerary_pipeline.configs.settings import get_settings
from itinerary_pipeline.configs.store import get_store_settings
from itinerary_pipeline.core.ingestion.lambda_utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

REQUIRED_VARS = ("STORE_API_URL", "MEDIA_BUCKET")
PLACEHOLDER_SECRET = "PLACEHOLDER_SET_VIA_CLI"


def validate_environment(required_vars: tuple[str, ...] = REQUIRED_VARS) -> dict[str, str]:
    """
    Validate required environment variables.

    Raises:
        ConfigurationError: One or more variables are unset or empty
    """
    env_config = {}
    missing = []
    for var in required_vars:
        value = os.getenv(var)
        if not value:
            missing.append(var)
        else:
            env_config[var] = value

    if missing:
        raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

    logger.info("validate_environment - Environment validated")
    return env_config


def configure_secrets(secrets_client=None) -> None:
    """
    Fetch the store API key from Secrets Manager into the environment.

    Only runs when ``STORE_API_KEY`` is unset and ``STORE_API_KEY_SECRET_ARN``
    is set. Cached settings are cleared so the key is picked up.
    """
    secret_arn = os.getenv("STORE_API_KEY_SECRET_ARN")
    if os.getenv("STORE_API_KEY") or not secret_arn:
        return

    client = secrets_client or boto3.session.Session().client("secretsmanager")
    try:
        response = client.get_secret_value(SecretId=secret_arn)
    except (ClientError, BotoCoreError) as e:
        logger.error("configure_secrets - Failed to fetch store API key: %s", e)
        return

    secret = response.get("SecretString")
    if not secret:
        logger.warning("configure_secrets - Store API key secret has no SecretString")
        return
    try:
        api_key = json.loads(secret).get("api_key")
    except (json.JSONDecodeError, AttributeError):
        api_key = secret

    if not api_key or api_key == PLACEHOLDER_SECRET:
        logger.warning("configure_secrets - Store API key is missing or placeholder")
        return

    os.environ["STORE_API_KEY"] = api_key
    get_store_settings.cache_clear()
    get_settings.cache_clear()
    logger.info("configure_secrets - Set STORE_API_KEY from secret")
