#!/usr/bin/env python3
"""
数据库初始化脚本
创建所有必要的数据库表并写入默认分类
"""

import sys
from pathlib import Path

# 添加项目根目录到Python路径
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

env_path = project_root.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

from app.db.init_db import init_db


if __name__ == "__main__":
    import logging
    logging.basicConfig(level=logging.INFO)
    init_db()
