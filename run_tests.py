#!/usr/bin/env python
"""
Quick reference: Running the test suite.

Execute this file or use the commands below directly.
"""

import subprocess
import sys


def run_tests():
    """Run all test groups."""

    print("=" * 70)
    print("RUNNING STREAM SENTINEL TEST SUITE")
    print("=" * 70)
    print()

    commands = [
        ("Unit Tests - Schema", "pytest tests/unit/test_schema.py -v"),
        ("Unit Tests - Window", "pytest tests/unit/test_window.py -v"),
        ("Unit Tests - Baselines", "pytest tests/unit/test_anomaly_baselines.py -v"),
        ("Unit Tests - Detectors", "pytest tests/unit/test_anomaly_detectors.py tests/unit/test_anomaly_scoring.py -v"),
        ("Unit Tests - Metrics", "pytest tests/unit/test_anomaly_metrics.py -v"),
        ("Unit Tests - Broadcast", "pytest tests/unit/test_broadcast.py -v"),
        ("Unit Tests - Engine", "pytest tests/unit/test_anomaly_engine.py -v"),
        ("Integration Tests - Pipeline", "pytest tests/integration/test_stream_pipeline.py -v"),
        ("All Tests with Coverage", "pytest tests/ -v --cov=src --cov-report=html"),
    ]

    failed = False
    for name, cmd in commands:
        print(f"\n{'='*70}")
        print(f"{name}")
        print(f"{'='*70}")
        print(f"Command: {cmd}\n")
        result = subprocess.run(cmd, shell=True)
        if result.returncode != 0:
            failed = True
            print(f"❌ {name} failed")
        else:
            print(f"✓ {name} passed")
    return failed


def run_specific_tests():
    """Print commands for specific test groups."""

    print("\nQuick test commands:")
    print("  pytest tests/unit/ -v          # All unit tests")
    print("  pytest tests/integration/ -v   # All integration tests")
    print("  pytest tests/ -v -m 'not slow' # Skip slow tests")
    print("  pytest tests/ -v -k broadcast  # Tests matching 'broadcast'")
    print("  pytest tests/ --co             # List test collection (no run)")


if __name__ == "__main__":
    failed = run_tests()
    run_specific_tests()
    sys.exit(1 if failed else 0)
