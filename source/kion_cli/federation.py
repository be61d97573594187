# ABOUTME: AWS console federation sign-in URLs built from temporary credentials
# ABOUTME: See the IAM guide on enabling custom identity broker access to the console

"""AWS console sign-in through the federation endpoint."""

import json
import logging
from urllib.parse import urlencode

import requests

from kion_cli.client import TemporaryCredentials
from kion_cli.errors import FederationError

logger = logging.getLogger(__name__)

FEDERATION_URL = "https://signin.aws.amazon.com/federation"
CONSOLE_LOGOUT_URL = "https://signin.aws.amazon.com/oauth?Action=logout"


def get_signin_token(credentials: TemporaryCredentials) -> str:
    session = {
        "sessionId": credentials.access_key_id,
        "sessionKey": credentials.secret_access_key,
        "sessionToken": credentials.session_token,
    }
    response = requests.get(
        FEDERATION_URL,
        params={"Action": "getSigninToken", "Session": json.dumps(session)},
    )
    if not response.ok:
        raise FederationError(f"federation: {response.status_code} {response.reason}")

    try:
        return response.json()["SigninToken"]
    except (ValueError, KeyError) as e:
        raise FederationError(f"federation: unexpected sign-in token response: {e}") from e


def signin_url(host: str, region: str, signin_token: str) -> str:
    params = {
        "Action": "login",
        "Issuer": f"https://{host}/login",
        "Destination": f"https://{region}.console.aws.amazon.com",
        "SigninToken": signin_token,
    }
    return f"{FEDERATION_URL}?{urlencode(params)}"


def logout_page(url: str) -> str:
    """HTML page that ends any existing console session, then opens url."""
    target = json.dumps(url).replace("</", "<\\/")
    return f"""<!DOCTYPE html>
<html>
<body>
    <script>
        var iframe = document.createElement("iframe");
        iframe.style = "visibility: hidden;";
        iframe.src = "{CONSOLE_LOGOUT_URL}";
        iframe.onload = function () {{
            window.location = {target};
        }};
        document.body.appendChild(iframe);
    </script>
</body>
</html>
"""
