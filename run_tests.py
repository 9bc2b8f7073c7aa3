#!/usr/bin/env python3
"""
Test runner for the Artechway blog.

Suites follow the areas of the app rather than the test files, so
``python run_tests.py ai`` runs every Gemini flow test whether it lives
in the service, route or integration module.
"""

import argparse
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).parent

SUITES = {
    "all": ["tests/"],
    "data": [
        "tests/test_models.py",
        "tests/test_repositories.py",
        "tests/test_cleanup_verification.py",
    ],
    "utils": ["tests/test_utils.py"],
    "ai": [
        "tests/test_services.py::TestGenerateBlogPost",
        "tests/test_services.py::TestGenerateBlogImage",
        "tests/test_services.py::TestSuggestRelatedPosts",
        "tests/test_services.py::TestRelatedPosts",
        "tests/test_routes.py::TestAdminAiApi",
        "tests/test_integration.py::TestRelatedPostsIntegration",
    ],
    "auth": [
        "tests/test_services.py::TestAuthenticate",
        "tests/test_routes.py::TestAuth",
        "tests/test_routes.py::TestAdminAccess",
        "tests/test_integration.py::TestAuthenticationFlow",
    ],
    "public": [
        "tests/test_routes.py::TestPublicPages",
        "tests/test_routes.py::TestMediaAndMisc",
        "tests/test_services.py::TestHomeSections",
        "tests/test_services.py::TestExcerpt",
    ],
    "admin": [
        "tests/test_routes.py::TestAdminPostViews",
        "tests/test_routes.py::TestAdminCategoryViews",
        "tests/test_routes.py::TestAdminPostApi",
        "tests/test_routes.py::TestAdminCategoryApi",
        "tests/test_services.py::TestPostImages",
    ],
    "integration": ["tests/test_integration.py"],
}


def build_command(suite: str, verbose: bool, coverage: bool, html: bool) -> list[str]:
    cmd = [sys.executable, "-m", "pytest", *SUITES[suite]]
    if verbose:
        cmd.append("-v")
    if coverage or html:
        cmd.extend(["--cov=artechway", "--cov-report=term-missing"])
    if html:
        cmd.append("--cov-report=html:htmlcov")
    return cmd


def main() -> int:
    parser = argparse.ArgumentParser(description="Run Artechway test suites")
    parser.add_argument("suite", nargs="?", default="all", choices=sorted(SUITES), help="Area of the app to test")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose pytest output")
    parser.add_argument("--coverage", "-c", action="store_true", help="Report coverage of the artechway package")
    parser.add_argument("--html-coverage", action="store_true", help="Also write an HTML coverage report to htmlcov/")
    args = parser.parse_args()

    cmd = build_command(args.suite, args.verbose, args.coverage, args.html_coverage)
    print(f"Running {args.suite} tests: {' '.join(cmd)}")
    exit_code = subprocess.run(cmd, cwd=ROOT).returncode

    if exit_code == 0:
        print(f"{args.suite} tests passed")
        if args.html_coverage:
            print("HTML coverage report: htmlcov/index.html")
    else:
        print(f"{args.suite} tests failed (exit code {exit_code})")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
