"""Taxonomy declaration and code assignment.

- CodeType/TaxonomyConfig: per-taxonomy code representation and auto-numbering
- VariantDeclaration/assign_codes/CodeTable: deterministic code assignment
- BizError/Classified: the error classification contract
"""

from .assigner import CodeTable, Shape, VariantDeclaration, assign_codes
from .classifier import BizError, Classified, convert_into, is_classified
from .codes import Code, CodeType, TaxonomyConfig, coerce_code

__all__ = [
    "Code", "CodeType", "TaxonomyConfig", "coerce_code",
    "VariantDeclaration", "Shape", "CodeTable", "assign_codes",
    "BizError", "Classified", "convert_into", "is_classified",
]
