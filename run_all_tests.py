#!/usr/bin/env python3
"""
Comprehensive test runner for the repository.

This script runs the test suites of every package plus the demo script and
reports per-module results. Can be used locally or in CI environments.
"""

import subprocess
import sys
import time

MODULES = ["lib", "devices", "activation"]


class TestRunner:
    """Orchestrates running all tests with proper reporting."""

    def __init__(self, verbose=True):
        self.verbose = verbose
        self.results = {}

    def log(self, message, level="INFO"):
        """Log message with timestamp."""
        if self.verbose:
            timestamp = time.strftime("%H:%M:%S")
            print(f"[{timestamp}] {level}: {message}")

    def run_command(self, command, cwd=None, description=""):
        """Run a command and capture output."""
        self.log(f"Running: {description or ' '.join(command)}")

        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=300,  # 5 minute timeout
            )
        except subprocess.TimeoutExpired:
            self.log(f"⏰ {description} - TIMEOUT", "ERROR")
            return False, "Command timed out"

        if result.returncode == 0:
            self.log(f"✅ {description} - PASSED")
            return True, result.stdout

        self.log(f"❌ {description} - FAILED", "ERROR")
        if self.verbose:
            self.log(f"STDOUT: {result.stdout}")
            self.log(f"STDERR: {result.stderr}")
        return False, result.stderr

    def test_module(self, module):
        """Run one package's tests with pytest."""
        self.log("=" * 60)
        self.log(f"TESTING {module.upper()} MODULE")
        self.log("=" * 60)

        success, _ = self.run_command(
            [sys.executable, "-m", "pytest", f"{module}/tests", "-v"],
            description=f"{module} pytest suite",
        )
        self.results[module] = success
        return success

    def test_main_script(self):
        """Run the demo script on the host."""
        success, _ = self.run_command(
            [sys.executable, "-m", "activation.main", "--device", "cpu"],
            description="Activation main script",
        )
        self.results["main_script"] = success
        return success

    def run_all_tests(self):
        """Run comprehensive test suite."""
        self.log("🚀 Starting comprehensive test suite...")
        start_time = time.time()

        test_results = [self.test_module(module) for module in MODULES]
        test_results.append(self.test_main_script())

        total_categories = len(test_results)
        passed_categories = sum(test_results)

        elapsed_time = time.time() - start_time
        self.log("=" * 60)
        self.log("TEST SUMMARY")
        self.log("=" * 60)

        for category, result in self.results.items():
            status = "✅ PASSED" if result else "❌ FAILED"
            self.log(f"{category.upper()}: {status}")

        self.log(f"\nOverall: {passed_categories}/{total_categories} categories passed")
        self.log(f"Execution time: {elapsed_time:.2f} seconds")

        if passed_categories == total_categories:
            self.log("🎉 ALL TESTS PASSED!")
            return True
        self.log("💥 SOME TESTS FAILED!")
        return False


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Run comprehensive test suite")
    parser.add_argument("--quiet", "-q", action="store_true", help="Reduce output verbosity")
    parser.add_argument(
        "--module",
        "-m",
        choices=MODULES + ["main"],
        help="Run tests for specific module only",
    )
    args = parser.parse_args()

    runner = TestRunner(verbose=not args.quiet)

    if args.module == "main":
        success = runner.test_main_script()
    elif args.module:
        success = runner.test_module(args.module)
    else:
        success = runner.run_all_tests()

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
