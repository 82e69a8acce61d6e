#!/usr/bin/env python3
"""Helper script to check and create the .env file for FikaConnect."""

from pathlib import Path
import os
import sys

TEMPLATE = """# Supabase Configuration (bookings and group deliveries)
# Get these from: https://supabase.com/dashboard → Your Project → Settings → API
FIKA_SUPABASE_URL=https://your-project-id.supabase.co
FIKA_SUPABASE_KEY=your-service-role-key-here

# API Configuration
FIKA_API_PREFIX=/api
# FIKA_FRONTEND_ALLOWED_ORIGINS accepts a JSON array or comma-separated list
# FIKA_FRONTEND_ALLOWED_ORIGINS=http://localhost:5173,http://127.0.0.1:5173

# Group deliveries
FIKA_GROUP_CAPACITY=4
FIKA_MAX_JOIN_ATTEMPTS=3

# OSRM Routing (Optional - straight-line estimates are used when empty)
FIKA_OSRM_BASE_URL=
"""


def _mask(value: str) -> str:
    return value[:20] + "..." + value[-6:] if len(value) > 30 else value


def main() -> int:
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("FikaConnect Environment Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        print(f"❌ .env file NOT found at: {env_file}")
        env_file.write_text(TEMPLATE, encoding="utf-8")
        print(f"✅ Created template .env file at: {env_file}")
        print("⚠️  Please edit .env and add your Supabase credentials!")
        return 0

    print(f"✅ Found .env file at: {env_file}")
    for line in env_file.read_text(encoding="utf-8").splitlines():
        if line.startswith("FIKA_SUPABASE_KEY=") and "=" in line:
            name, value = line.split("=", 1)
            print(f"{name}={_mask(value.strip())}")
        else:
            print(line)
    print()

    for name in ("FIKA_SUPABASE_URL", "FIKA_SUPABASE_KEY", "FIKA_OSRM_BASE_URL"):
        value = os.getenv(name)
        print(f"{'✅' if value else '❌'} {name} {'(from environment)' if value else 'not set in environment'}")
    print()

    try:
        sys.path.insert(0, str(project_root / "src"))
        from fikaconnect.config import settings
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        return 1

    if settings.supabase_url and settings.supabase_key:
        print("✅ SUCCESS: Supabase is configured!")
    else:
        print("❌ Supabase is NOT configured - bookings will be kept in memory only")
        print("   Make sure variables start with the FIKA_ prefix and restart the backend.")
    print(f"ℹ️  Route estimates: {'OSRM at ' + settings.osrm_base_url if settings.osrm_base_url else 'straight-line (haversine)'}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
