import hmac
import logging
import os
from typing import Any, Optional

from cloud_highway.common.constants import API_SECRET_ENVIRONMENT_VARIABLE, API_SECRET_HEADER
from cloud_highway.common.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

PRINCIPAL_ID = "RapidAPI"


def generate_policy(principal_id: str, effect: str, resource: str) -> dict[str, Any]:
    return {
        "principalId": principal_id,
        "policyDocument": {
            "Version": "2012-10-17",
            "Statement": [{"Action": "execute-api:Invoke", "Effect": effect, "Resource": resource}],
        },
    }


def _get_header(headers: Optional[dict[str, Any]], name: str) -> Optional[str]:
    if not headers:
        return None
    name = name.lower()
    for header, value in headers.items():
        if header.lower() == name:
            return value
    return None


def authorize(event: dict[str, Any], context: Any) -> dict[str, Any]:  # pylint: disable=unused-argument
    expected_secret = os.environ.get(API_SECRET_ENVIRONMENT_VARIABLE)
    provided_secret = _get_header(event.get("headers"), API_SECRET_HEADER)

    if (
        not expected_secret
        or not isinstance(provided_secret, str)
        or not hmac.compare_digest(provided_secret.encode("utf-8"), expected_secret.encode("utf-8"))
    ):
        logger.warning("Denied request to %s", event.get("methodArn"))
        raise UnauthorizedError("Unauthorized")

    return generate_policy(PRINCIPAL_ID, "Allow", event["methodArn"])
