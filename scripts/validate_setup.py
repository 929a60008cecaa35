"""Validate that the service is properly set up and configured."""

import asyncio
import sys
from pathlib import Path


async def check_python_version() -> bool:
    """Check if Python version is 3.11+."""
    print("\nChecking Python version...")

    version = sys.version_info
    if version < (3, 11):
        print(f"  ❌ Python {version.major}.{version.minor} detected")
        print("  → Python 3.11+ required")
        return False

    print(f"  ✓ Python {version.major}.{version.minor} detected")
    return True


async def check_env_file() -> bool:
    """Check that .env defines the required variables."""
    print("Checking environment configuration...")

    env_path = Path(".env")
    if not env_path.exists():
        print("  ❌ .env file not found!")
        print("  → Create one with SECRET_KEY and REDIS_URL")
        return False

    env_content = env_path.read_text()
    missing_vars = [var for var in ("SECRET_KEY", "REDIS_URL") if f"{var}=" not in env_content]

    if missing_vars:
        print(f"  ❌ Missing variables: {', '.join(missing_vars)}")
        return False

    print("  ✓ Environment file configured")
    return True


async def check_project_structure() -> bool:
    """Check if all required files exist."""
    print("\nChecking project structure...")

    required_paths = [
        "pizzeria/main.py",
        "pizzeria/api/orders.py",
        "pizzeria/api/inventory.py",
        "pizzeria/services/ordering.py",
        "pizzeria/services/transitions.py",
        "pizzeria/state/catalog.py",
        "pyproject.toml",
    ]

    missing = [path for path in required_paths if not Path(path).exists()]
    if missing:
        print("  ❌ Missing files:")
        for path in missing:
            print(f"     - {path}")
        return False

    print("  ✓ All required files present")
    return True


async def check_redis() -> bool:
    """Check that Redis answers a PING with the configured URL."""
    print("\nChecking Redis...")

    from redis.exceptions import RedisError

    from pizzeria.state.manager import StateManager

    state_manager = StateManager()
    try:
        await state_manager.ping()
    except RedisError as e:
        print(f"  ❌ Redis not reachable at {state_manager.redis_url}: {e}")
        return False
    finally:
        await state_manager.disconnect()

    print(f"  ✓ Redis reachable at {state_manager.redis_url}")
    return True


async def main() -> None:
    """Run all validation checks."""
    print("\n" + "=" * 60)
    print("  Pizzeria Order Service - Setup Validation")
    print("=" * 60 + "\n")

    checks = [
        ("Python Version", check_python_version),
        ("Environment", check_env_file),
        ("Project Structure", check_project_structure),
        ("Redis", check_redis),
    ]

    results = []
    for name, check in checks:
        try:
            result = await check()
        except Exception as e:
            print(f"  ❌ Error during {name} check: {e}")
            result = False
        results.append((name, result))

    print("\n" + "=" * 60)
    print("  Validation Summary")
    print("=" * 60)

    for name, passed in results:
        print(f"  {'✓' if passed else '❌'} {name}")

    print("=" * 60)

    if all(passed for _, passed in results):
        print("\n✅ All checks passed! Service is ready.")
        print("\nNext steps:")
        print("  1. Seed data: python scripts/seed_data.py")
        print("  2. Start API: uvicorn pizzeria.main:app --reload")
        print("  3. View docs: http://localhost:8000/docs")
    else:
        print("\n❌ Some checks failed. Please fix the issues above.")
        sys.exit(1)

    print()


if __name__ == "__main__":
    asyncio.run(main())
