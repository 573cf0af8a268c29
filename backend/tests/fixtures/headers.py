"""Gateway identity headers for API tests."""

from .builders import ORG_ACME, ORG_GLOBEX

CLIENT_HEADERS = {
    "X-Actor-Id": "u-client-1",
    "X-Actor-Role": "CLIENT",
    "X-Actor-Org": ORG_ACME,
    "X-Actor-Name": "Clara Client",
    "X-Actor-Org-Name": "Acme Construction",
}
OTHER_CLIENT_HEADERS = {
    "X-Actor-Id": "u-client-2",
    "X-Actor-Role": "CLIENT",
    "X-Actor-Org": ORG_GLOBEX,
}
QUALITY_HEADERS = {"X-Actor-Id": "u-quality-1", "X-Actor-Role": "QUALITY", "X-Actor-Name": "Ines Kraft"}
ADMIN_HEADERS = {"X-Actor-Id": "u-admin-1", "X-Actor-Role": "ADMIN"}
