import json
import os
import sys

# Add src to path for running directly
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from coreason_oauth_card.broker import MemoryBroker
from coreason_oauth_card.component import OAuthCardComponent
from coreason_oauth_card.config import OAuthCardConfig
from coreason_oauth_card.models import TokenSet


def show(label: str, raw: str) -> dict:
    response = json.loads(raw)
    print(f">>> {label}: status={response['status']}")
    card = response.get("card")
    if card:
        print(f"    card: {card.get('title')}")
        for action in card.get("actions", []):
            print(f"      [{action['type']}] {action['title']}")
    return response


def main() -> None:
    """
    Walks through a full connect-account flow against an in-memory broker:
    status (not connected) -> start sign-in -> complete sign-in -> ensure token -> disconnect.
    """
    broker = MemoryBroker(consent_url="https://login.example.com/consent?client_id=demo")
    request = {"provider_id": "msgraph", "subject": "user-1", "scopes": ["openid", "Mail.Read"]}

    with OAuthCardComponent(OAuthCardConfig(), broker=broker) as component:
        show("status-card", component.handle_message(json.dumps({**request, "mode": "status-card"})))

        started = show("start-sign-in", component.handle_message(json.dumps({**request, "mode": "start-sign-in"})))

        # The provider redirects back with a code; the broker exchanges it
        broker.token = TokenSet(access_token="demo-token", expires_at=1_900_000_000, extra={"email": "user@example.com"})
        complete = {**request, "mode": "complete-sign-in", "state_id": started["state_id"], "auth_code": "code-123"}
        completed = show("complete-sign-in", component.handle_message(json.dumps(complete)))
        print(f"    header: {completed['auth_header']['headers'][0]}")

        show("ensure-token", component.handle_message(json.dumps({**request, "mode": "ensure-token"})))
        show("disconnect", component.handle_message(json.dumps({**request, "mode": "disconnect"})))


if __name__ == "__main__":
    main()
