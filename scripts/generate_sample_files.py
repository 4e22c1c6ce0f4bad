#!/usr/bin/env python3
"""
Generate sample product files for the upload pipeline.

Writes CSV (polars) and/or xlsx (openpyxl) files with random products:
    ProductID, ProductName, Price, Quantity[, Tags, Categories]

Tags and Categories hold 1-3 comma separated values, the input the
multi-value normalization of the workers expects.

Usage:
    python scripts/generate_sample_files.py 100
    python scripts/generate_sample_files.py 5000 --format xlsx --seed 7
    python scripts/generate_sample_files.py 50 --plain --output-dir samples/

Output:
    - products_<count>_<timestamp>.csv
    - products_<count>_<timestamp>.xlsx (products sheet plus a Legend sheet)
"""

import argparse
import logging
import random
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import polars as pl
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

POSSIBLE_TAGS = [
    "New",
    "Bestseller",
    "Sale",
    "Premium",
    "Limited",
    "Exclusive",
    "Featured",
    "Trending",
    "Popular",
    "Seasonal",
]

POSSIBLE_CATEGORIES = [
    "Electronics",
    "Gaming",
    "Office",
    "Home",
    "Accessories",
    "Computer",
    "Mobile",
    "Audio",
    "Video",
    "Networking",
]

DEPARTMENTS = ["Garden", "Kids", "Sports", "Tools", "Music", "Outdoors", "Books", "Health"]
ADJECTIVES = ["Small", "Ergonomic", "Rustic", "Sleek", "Practical", "Handmade", "Modern", "Generic"]
MATERIALS = ["Steel", "Wooden", "Cotton", "Granite", "Plastic", "Rubber", "Bronze", "Concrete"]
PRODUCTS = ["Chair", "Lamp", "Keyboard", "Table", "Mouse", "Shirt", "Speaker", "Bottle"]

BASE_COLUMNS = ["ProductID", "ProductName", "Price", "Quantity"]
MULTI_VALUE_COLUMNS = ["Tags", "Categories"]


def generate_products(count: int, multi_value: bool = True, seed: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    Generate product rows.

    Args:
        count: Number of products
        multi_value: Add Tags and Categories columns
        seed: Seed for reproducible output

    Returns:
        List of row dicts with BASE_COLUMNS (+ MULTI_VALUE_COLUMNS)
    """
    rng = random.Random(seed)
    products = []
    for index in range(count):
        product: Dict[str, Any] = {
            "ProductID": f"P{index + 1:06d}",
            "ProductName": (
                f"{rng.choice(DEPARTMENTS)} {rng.choice(ADJECTIVES)} "
                f"{rng.choice(MATERIALS)} {rng.choice(PRODUCTS)}"
            ),
            "Price": round(rng.uniform(10, 2000), 2),
            "Quantity": rng.randint(1, 1000),
        }
        if multi_value:
            product["Tags"] = ",".join(rng.sample(POSSIBLE_TAGS, rng.randint(1, 3)))
            product["Categories"] = ",".join(rng.sample(POSSIBLE_CATEGORIES, rng.randint(1, 3)))
        products.append(product)
    return products


def write_csv(products: List[Dict[str, Any]], path: Path) -> Path:
    """Write products as CSV; values containing commas are quoted by polars."""
    if products:
        df = pl.DataFrame(products)
    else:
        df = pl.DataFrame(schema={column: pl.String for column in BASE_COLUMNS})
    df.write_csv(path)
    return path


def write_xlsx(products: List[Dict[str, Any]], path: Path) -> Path:
    """Write products to a "Products" sheet with a styled header and a "Legend" sheet."""
    columns = list(products[0]) if products else BASE_COLUMNS
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Products"

    sheet.append(columns)
    for cell in sheet[1]:
        cell.font = Font(bold=True)
        cell.fill = PatternFill(fill_type="solid", fgColor="FFE0E0E0")

    for product in products:
        sheet.append([product[column] for column in columns])

    widths = {"ProductID": 15, "ProductName": 40, "Price": 15, "Quantity": 15, "Tags": 30, "Categories": 30}
    for index, column in enumerate(columns, start=1):
        sheet.column_dimensions[sheet.cell(row=1, column=index).column_letter].width = widths[column]

    if "Tags" in columns:
        legend = workbook.create_sheet("Legend")
        legend.append(["Available Tags:", ", ".join(POSSIBLE_TAGS)])
        legend.append(["Available Categories:", ", ".join(POSSIBLE_CATEGORIES)])
        legend.column_dimensions["A"].width = 20
        legend.column_dimensions["B"].width = 100

    workbook.save(path)
    return path


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Generate sample product files (CSV / xlsx)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 100 products, CSV and xlsx, with Tags/Categories
  python scripts/generate_sample_files.py 100

  # Reproducible xlsx only
  python scripts/generate_sample_files.py 5000 --format xlsx --seed 7

  # Without multi-value columns
  python scripts/generate_sample_files.py 50 --plain
        """,
    )
    parser.add_argument("count", type=int, help="Number of products to generate")
    parser.add_argument(
        "--format",
        choices=["csv", "xlsx", "both"],
        default="both",
        help="Output format (default: both)",
    )
    parser.add_argument("--plain", action="store_true", help="Omit Tags and Categories columns")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("."),
        help="Directory for the generated files (default: current directory)",
    )

    args = parser.parse_args(argv)
    if args.count <= 0:
        parser.error("count must be a positive number")
    return args


def main(argv: Optional[List[str]] = None) -> List[Path]:
    """Generate the requested files and return their paths."""
    args = parse_args(argv)
    products = generate_products(args.count, multi_value=not args.plain, seed=args.seed)

    args.output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
    stem = args.output_dir / f"products_{args.count}_{timestamp}"

    written = []
    if args.format in ("csv", "both"):
        written.append(write_csv(products, stem.with_suffix(".csv")))
    if args.format in ("xlsx", "both"):
        written.append(write_xlsx(products, stem.with_suffix(".xlsx")))

    for path in written:
        logger.info(f"Generated {path} with {args.count} products")
    return written


if __name__ == "__main__":
    main()
