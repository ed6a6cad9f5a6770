from .calculator import (
    change_status,
    create_offerte,
    duplicate_offerte,
    find_offerte,
    get_offerte,
    list_offertes,
    recompute_quote,
    save_offerte,
    transition,
    update_offerte,
)
from .context import RateContext, SiteConditions, load_rate_context
from .correction import CorrectionFactorResolver
from .errors import (
    ConfigurationError,
    NotFoundError,
    OfferteError,
    StatusTransitionError,
    StoreError,
    UnresolvedFactorError,
    ValidationError,
)
from .repositories import InstellingenRepository, NormHourRepository, ProductCatalog
from .store import RecordStore
from .synthesizer import synthesize
from .totals import aggregate

__version__ = "1.0.0"
