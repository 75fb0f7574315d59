"""
SQLAlchemy models for Neighbo.
"""
# Catalog
from neighbo.models.value import Value

# Core aggregate
from neighbo.models.restaurant import Restaurant, ValueAssertion

# People
from neighbo.models.user import User
from neighbo.models.favorite import Favorite

# Certification & community
from neighbo.models.certification import CertificationEvidence
from neighbo.models.report import Report
from neighbo.models.claim import BusinessClaim


__all__ = [
    # Catalog
    "Value",
    # Core
    "Restaurant",
    "ValueAssertion",
    # People
    "User",
    "Favorite",
    # Certification & community
    "CertificationEvidence",
    "Report",
    "BusinessClaim",
]
