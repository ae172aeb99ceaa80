"""Statement Trade Reconciler.

Turns statement rows handed over by a document extraction step into
reconciled trade transactions with settlement dates and commissions.
"""

__version__ = "1.0.0"
__author__ = "Statement Processing Team"
