from .organization import Organization  # noqa: F401
from .user import User  # noqa: F401
from .company import Company, FinancialMetric  # noqa: F401
from .deal import CompanyView, Deal, Nda, WatchlistEntry  # noqa: F401
from .media import MediaAsset  # noqa: F401
from .financing import CalculatorLead, FinancingNeed  # noqa: F401
from .language import Language  # noqa: F401
