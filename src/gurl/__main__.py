"""
Entry point for `python -m gurl`.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from gurl.http.cli import main

if __name__ == "__main__":
    main()
