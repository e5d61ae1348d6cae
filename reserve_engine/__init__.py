"""BTB Reserve Engine - reserve-backed bonding-curve token."""

from reserve_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from reserve_engine.engine import ReserveEngine
from reserve_engine.ledger import InMemoryLedger
from reserve_engine.models.state import TxContext

__version__ = "0.1.0"
__all__ = [
    "ReserveEngine",
    "EngineConfig",
    "DEFAULT_ENGINE_CONFIG",
    "InMemoryLedger",
    "TxContext",
    "__version__",
]
