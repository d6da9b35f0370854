#!/usr/bin/env python3
"""Build Lambda deployment packages."""

import os
import shutil
import sys
import zipfile
from pathlib import Path

LAMBDAS = ["lambda_trends", "lambda_warnings"]

# Runtime dependencies (and their transitive packages) copied from site-packages
PACKAGES_TO_COPY = [
    "pydantic",
    "pydantic_core",
    "pydantic_settings",
    "dotenv",
    "python_dotenv",
    "typing_extensions",
    "typing_inspection",
    "annotated_types",
    "requests",
    "urllib3",
    "charset_normalizer",
    "idna",
    "certifi",
    "pandas",
    "numpy",
    "pytz",
    "python_dateutil",
    "dateutil",
    "tzdata",
    "six",
]


def _copy_dependencies(site_packages: Path, target_dir: Path) -> None:
    for pkg in PACKAGES_TO_COPY:
        pkg_path = site_packages / pkg
        if pkg_path.exists():
            if pkg_path.is_dir():
                shutil.copytree(pkg_path, target_dir / pkg, dirs_exist_ok=True)
            else:
                shutil.copy2(pkg_path, target_dir / pkg)

        for dist_info in site_packages.glob(f"{pkg}*.dist-info"):
            shutil.copytree(dist_info, target_dir / dist_info.name, dirs_exist_ok=True)

    # numpy/pandas wheels ship their compiled libs next to site-packages
    for libs in ("numpy.libs", "pandas.libs"):
        for candidate in (site_packages / libs, site_packages.parent / libs):
            if candidate.exists():
                shutil.copytree(candidate, target_dir / libs, dirs_exist_ok=True)


def build_lambda_package(lambda_name: str, site_packages_dir: str, output_dir: str) -> Path:
    """Build a Lambda deployment package.

    Args:
        lambda_name: Name of the Lambda function (e.g., 'lambda_trends').
        site_packages_dir: Directory containing installed Python packages.
        output_dir: Directory to write the ZIP file to.

    Returns:
        Path of the written ZIP file.
    """
    print(f"Building {lambda_name}...")

    temp_dir = Path(output_dir) / f"{lambda_name}_temp"
    temp_dir.mkdir(parents=True, exist_ok=True)

    try:
        lambda_dir = Path(lambda_name)
        for name in ("handler.py", "__init__.py"):
            if (lambda_dir / name).exists():
                shutil.copy2(lambda_dir / name, temp_dir / name)

        common_dir = Path("common")
        if common_dir.exists():
            shutil.copytree(
                common_dir,
                temp_dir / "common",
                dirs_exist_ok=True,
                ignore=shutil.ignore_patterns("__pycache__", "*.pyc"),
            )

        site_packages = Path(site_packages_dir)
        if site_packages.exists():
            _copy_dependencies(site_packages, temp_dir)
        else:
            print(f"  Warning: {site_packages} not found, packaging without dependencies")

        zip_path = Path(output_dir) / f"{lambda_name}.zip"
        with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as zipf:
            for root, _dirs, files in os.walk(temp_dir):
                for file in files:
                    file_path = Path(root) / file
                    zipf.write(file_path, file_path.relative_to(temp_dir))

        print(f"✓ Built {zip_path}")
        return zip_path

    finally:
        if temp_dir.exists():
            shutil.rmtree(temp_dir)


def main():
    """Main build function."""
    site_packages = sys.argv[1] if len(sys.argv) > 1 else "packages"
    output_dir = "dist"

    Path(output_dir).mkdir(parents=True, exist_ok=True)

    for lambda_name in LAMBDAS:
        build_lambda_package(lambda_name, site_packages, output_dir)

    print(f"\n✓ All Lambda packages built successfully in {output_dir}/")


if __name__ == "__main__":
    main()
