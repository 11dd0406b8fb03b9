"""panelboard: electrical panel records over a JSON HTTP API, with form validation and an in-memory store."""

__version__ = "0.1.0"

from .assembler import PanelAssembler
from .client import PanelApiClient
from .config import ClientConfig, load_config
from .errors import (
    ConfigError,
    FormNotReadyError,
    NetworkError,
    PanelboardError,
    ReadOnlyFieldError,
    RemoteError,
    WireFormatError,
)
from .listing import PanelListController, PanelRow
from .store import PanelStore
from .types import FormDraft, Panel, PanelDraft, PanelPage, PanelState
from .workflow import SubmitResult, UpsertWorkflow, WorkflowMode, validate_form

__all__ = [
    "__version__",
    "PanelAssembler",
    "PanelApiClient",
    "ClientConfig",
    "load_config",
    "ConfigError",
    "FormNotReadyError",
    "NetworkError",
    "PanelboardError",
    "ReadOnlyFieldError",
    "RemoteError",
    "WireFormatError",
    "PanelListController",
    "PanelRow",
    "PanelStore",
    "FormDraft",
    "Panel",
    "PanelDraft",
    "PanelPage",
    "PanelState",
    "SubmitResult",
    "UpsertWorkflow",
    "WorkflowMode",
    "validate_form",
]
