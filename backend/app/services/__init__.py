"""Service layer holding the salon session logic used by the API routers."""

from .csv_parser import CSVField, DateFormatError, ParseResult, parse_csv, parse_date
from .data_management import (
    ImportStatus,
    export_clients,
    export_services,
    import_clients,
    import_services,
)
from .gateway import (
    DocumentNotFoundError,
    DocumentStoreGateway,
    GatewayError,
    PersistenceGateway,
)
from .records import RecordValidationError
from .state import Action, ActionType, AppState, app_reducer
from .store import AuthenticationRequiredError, SalonStore, SessionRegistry

__all__ = [
    "Action",
    "ActionType",
    "AppState",
    "AuthenticationRequiredError",
    "CSVField",
    "DateFormatError",
    "DocumentNotFoundError",
    "DocumentStoreGateway",
    "GatewayError",
    "ImportStatus",
    "ParseResult",
    "PersistenceGateway",
    "RecordValidationError",
    "SalonStore",
    "SessionRegistry",
    "app_reducer",
    "export_clients",
    "export_services",
    "import_clients",
    "import_services",
    "parse_csv",
    "parse_date",
]
