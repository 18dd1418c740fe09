"""
生成月度账单
用法: python app/scripts/generate_bills.py [--month 3 --year 2025]
不指定时为当前月份；可配合 cron 在每月初执行
"""
import argparse
import logging
import os
import sys

# 添加项目根目录到路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from app.core.clock import utcnow
from app.core.errors import AppError
from app.core.logging import setup_logging
from app.db.database import SessionLocal
from app.db.init_db import init_db
from app.services.billing import generate_monthly_bills

logger = logging.getLogger("generate_bills")


def parse_args(argv=None):
    now = utcnow()
    parser = argparse.ArgumentParser(description="Generate or refresh monthly billing cycles")
    parser.add_argument("--month", type=int, default=now.month, help="Billing month (1-12)")
    parser.add_argument("--year", type=int, default=now.year, help="Billing year")
    parser.add_argument("--customer", type=int, action="append", dest="customer_ids",
                        help="Only this customer id (repeatable)")
    return parser.parse_args(argv)


def run(month: int, year: int, customer_ids=None) -> int:
    """执行生成，返回进程退出码"""
    db = SessionLocal()
    try:
        result = generate_monthly_bills(db, month, year, customer_ids=customer_ids)
    except AppError as e:
        logger.error("Bill generation failed: %s", e.detail)
        return 1
    finally:
        db.close()
    logger.info(
        "Done: %d customers processed (%d created, %d updated)",
        result.processed, result.created, result.updated
    )
    return 0


if __name__ == "__main__":
    setup_logging()
    args = parse_args()
    init_db()
    sys.exit(run(args.month, args.year, args.customer_ids))
