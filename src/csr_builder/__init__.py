"""CSR Builder.

Builds PKCS#10 certificate requests from a certificate profile, a key
algorithm and subject information.
"""

__version__ = "0.1.0"
