"""
gurl - command-line HTTP client

Sends a single request built from freeform request items
(`key=value` body fields, `Name:Value` headers) and prints the response.
The dial target can be overridden while keeping the original Host.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

__version__ = "0.1.0"
__author__ = "DNS Science.io"
__copyright__ = "Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company"
