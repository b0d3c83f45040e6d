from client.config import ClientConfig
from client.fallback import Local, Remote, execute
from client.forms import Form, Storefront, SubmitOutcome
from client.gateway import Gateway
from client.storage import LocalPersistence, LocalStore, Session

__all__ = [
    "ClientConfig",
    "Form",
    "Gateway",
    "Local",
    "LocalPersistence",
    "LocalStore",
    "Remote",
    "Session",
    "Storefront",
    "SubmitOutcome",
    "execute",
]
