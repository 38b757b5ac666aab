"""Domain errors raised by the scan-list engine.

Every error carries a stable ``error_code`` and the HTTP status the API layer
answers with. User-recoverable scan errors (not expected, already scanned,
not found, ambiguous, too fast...) are raised before any state is touched,
so the operator can simply scan again.
"""
from typing import Any, Dict, List, Optional


class LogiScanError(Exception):
    error_code = "logiscan_error"
    http_status = 400

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def to_problem(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "http_status": self.http_status,
            "context": self.context,
        }


# --- generation ---

class NoQuoteItems(LogiScanError):
    error_code = "no_quote_items"
    http_status = 422

    def __init__(self, message: str = "The quote contains no items", **context: Any):
        super().__init__(message, **context)


class EventNotFinalized(NoQuoteItems):
    error_code = "event_not_finalized"

    def __init__(self, event_id: str):
        super().__init__(f"Event {event_id} quote is not finalized", event_id=event_id)


class InvalidQuoteItem(LogiScanError):
    error_code = "invalid_quote_item"
    http_status = 422


# --- lookups ---

class EventNotFound(LogiScanError):
    error_code = "event_not_found"
    http_status = 404

    def __init__(self, event_id: str):
        super().__init__(f"Event {event_id} not found", event_id=event_id)


class ScanListNotFound(LogiScanError):
    error_code = "scan_list_not_found"
    http_status = 404

    def __init__(self, scan_list_id: Any):
        super().__init__(f"Scan list {scan_list_id} not found", scan_list_id=str(scan_list_id))


class StockItemNotFound(LogiScanError):
    error_code = "stock_item_not_found"
    http_status = 404

    def __init__(self, sku: str):
        super().__init__(f"Stock item {sku} not found", sku=sku)


class MovementNotFound(LogiScanError):
    error_code = "movement_not_found"
    http_status = 404

    def __init__(self, movement_id: Any):
        super().__init__(f"Movement {movement_id} not found", movement_id=str(movement_id))


class DuplicateStockItem(LogiScanError):
    error_code = "duplicate_stock_item"
    http_status = 409

    def __init__(self, sku: str):
        super().__init__(f"Stock item {sku} already exists", sku=sku)


class InsufficientStock(LogiScanError):
    error_code = "insufficient_stock"
    http_status = 409


# --- scanning (recoverable, nothing mutated) ---

class ScanRejected(LogiScanError):
    http_status = 409


class AssetNotFound(ScanRejected):
    error_code = "asset_not_found"
    http_status = 404

    def __init__(self, code: str):
        super().__init__(f"No asset matches code {code!r}", code=code)


class AssetNotExpected(ScanRejected):
    error_code = "asset_not_expected"

    def __init__(self, asset_id: Optional[str], sku: str):
        super().__init__(f"SKU {sku} is not expected in this scan list", asset_id=asset_id, sku=sku)


class AssetAlreadyScanned(ScanRejected):
    error_code = "asset_already_scanned"

    def __init__(self, asset_id: Optional[str], sku: str):
        what = f"Asset {asset_id}" if asset_id else f"SKU {sku}"
        super().__init__(f"{what} has already been scanned in this list", asset_id=asset_id, sku=sku)


class AmbiguousMatch(ScanRejected):
    error_code = "ambiguous_match"

    def __init__(self, code: str, candidates: List[Any]):
        self.candidates = list(candidates)
        super().__init__(
            f"Code {code!r} matches {len(self.candidates)} assets, pick one explicitly",
            code=code,
            candidates=[c.asset_id for c in self.candidates],
        )


class AssetUnavailable(ScanRejected):
    error_code = "asset_unavailable"


class TooFast(ScanRejected):
    error_code = "too_fast"
    http_status = 429

    def __init__(self, elapsed: float, min_interval: float):
        self.elapsed = elapsed
        super().__init__(
            f"Scan ignored, wait {min_interval:.1f}s between scans",
            elapsed=round(elapsed, 3),
            min_interval=min_interval,
        )


class ListNotActive(ScanRejected):
    error_code = "list_not_active"

    def __init__(self, scan_list_id: Any, status: str):
        super().__init__(
            f"Scan list {scan_list_id} is {status}",
            scan_list_id=str(scan_list_id),
            status=status,
        )


class AssetNotScanned(ScanRejected):
    error_code = "asset_not_scanned"

    def __init__(self, asset_id: str):
        super().__init__(f"Asset {asset_id} is not scanned in this list", asset_id=asset_id)


# --- integrity / infrastructure ---

class InvariantViolation(LogiScanError):
    error_code = "invariant_violation"
    http_status = 500


class ConcurrentModification(LogiScanError):
    error_code = "concurrent_modification"
    http_status = 409

    def __init__(self, scan_list_id: Any, expected: int, actual: int):
        super().__init__(
            f"Scan list {scan_list_id} changed (version {actual}, expected {expected})",
            scan_list_id=str(scan_list_id),
            expected_version=expected,
            actual_version=actual,
        )


class PersistenceError(LogiScanError):
    error_code = "persistence_error"
    http_status = 500


class CompletionEffectError(LogiScanError):
    error_code = "completion_effect_error"
    http_status = 500
