"""Type aliases using modern PEP 695 syntax.

This module defines the union types shared by the calculator and the
report renderer, using Python 3.13+ type statement syntax.
"""

from decom_status.types.models import InProgress, NotDraining, Starting

# Classified state of one pool for a single poll
# Renderers match on the variant; NotDraining pools are skipped
type DecommissionView = NotDraining | Starting | InProgress

# Views that appear in the report
type DrainingView = Starting | InProgress
