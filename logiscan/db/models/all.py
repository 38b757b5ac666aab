# Importing this module registers every table on Base.metadata.
from logiscan.db.models.stock_items import StockItem  # noqa: F401
from logiscan.db.models.assets import Asset  # noqa: F401
from logiscan.db.models.events import Event  # noqa: F401
from logiscan.db.models.quote_items import QuoteItem  # noqa: F401
from logiscan.db.models.scan_lists import PreparationListItem, ScanList  # noqa: F401
from logiscan.db.models.movements import Movement  # noqa: F401
