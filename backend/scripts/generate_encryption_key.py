#!/usr/bin/env python3
"""
Print a fresh ENCRYPTION_KEY (32 random bytes as 64 hex characters).

Changing the key makes every stored card, bank account and address field
unreadable; generate it once per deployment.
"""

import secrets


def main():
    key = secrets.token_hex(32)
    print("🔑 Add this line to backend/.env:")
    print(f"ENCRYPTION_KEY={key}")


if __name__ == "__main__":
    main()
