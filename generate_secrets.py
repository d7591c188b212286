#!/usr/bin/env python3
"""
Generate secure secrets for the survivor pool
Run this script to generate the required SECRET_KEY and JWT_SECRET_KEY
"""

import secrets


def generate_secrets():
    """Generate secure random keys for the application"""
    print("Generating secure secrets for the survivor pool...")
    print("=" * 50)

    print(f"SECRET_KEY={secrets.token_urlsafe(32)}")
    print(f"JWT_SECRET_KEY={secrets.token_urlsafe(48)}")

    print("=" * 50)
    print("Copy these values to your .env file")
    print("Keep these secrets secure and never commit them to version control!")


if __name__ == "__main__":
    generate_secrets()
