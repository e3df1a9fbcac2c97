#!/usr/bin/env python3
"""
HR Product Form MCP Server
产品表单规则引擎的MCP服务入口
"""

import logging
import os

from dotenv import load_dotenv
from fastmcp import FastMCP
from fastmcp.server.auth import StaticTokenVerifier

from .tools import register_tools

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)

# 设置静态token认证
# 从环境变量获取token，如果没有则使用默认值
auth_token = os.getenv("MCP_AUTH_TOKEN", "hr-product-form-dev")
auth_verifier = StaticTokenVerifier(tokens={
    auth_token: {
        "client_id": "product-form-client",
        "scopes": ["read", "write"]
    }
})

mcp = FastMCP(
    name="HR Product Form Manager",
    auth=auth_verifier,
    instructions="""
# HR-Tech Marketplace Product Form

Tier-aware product listing drafts for vendors on the HR-tech marketplace.

## Core Workflow
1. **Create or load**: create_product_draft(user_id, tier, ...) or load_product_record(user_id, record, tier)
2. **Edit**: update_product_draft for scalar fields, add_to_product_draft / remove_from_product_draft for collections
3. **Check**: get_product_draft shows completion and what the tier allows; list_product_drafts finds open drafts; validate_product_draft lists field errors
4. **Export**: export_product_payload(draft_id) returns the backend payload

## Subscription Tiers
- **freemium**: main category only, 3 features, no gallery, no video, no demo link
- **silver** (plus): main + 2 categories, 5 features, 5 gallery images, no video, no demo link
- **gold** (premium): main + 4 categories, 10 features, 10 gallery images, video and demo link

## Rules
- Items over a tier limit are never errors; they come back under "rejected"
- The main category never appears among the secondary categories
- Required to submit: product_name, short_desc, main_category, logo
- After a tier change the draft keeps its content; export strips what the tier does not allow
    """
)

# 注册所有工具
register_tools(mcp)


def main():
    """主函数入口"""
    host = os.getenv("MCP_HOST", "127.0.0.1")
    port = int(os.getenv("MCP_PORT", "8000"))
    logger.info(f"Starting product form MCP server on {host}:{port}")
    mcp.run(transport="http", host=host, port=port)


if __name__ == "__main__":
    main()
