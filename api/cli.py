#!/usr/bin/env python3
"""CLI for the blog service.

Usage:
    python -m cli <command>

Commands:
    serve      Run the RPC server
    init-db    Create the blog collection and exit
    demo       Run the create/read/update/delete walkthrough against a server
    create     CreateBlog
    read       ReadBlog
    update     UpdateBlog
    delete     DeleteBlog
"""

import argparse
import asyncio
import json
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def cmd_serve(host: str | None, port: int | None) -> int:
    """Run the RPC server with uvicorn."""
    import uvicorn

    from core.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=host or settings.host,
        port=port or settings.port,
        log_config=None,
    )
    return 0


async def _init_db() -> None:
    from core.database import create_engine, dispose_engine, init_db

    engine = create_engine()
    try:
        await init_db(engine)
    finally:
        await dispose_engine(engine)


def cmd_init_db() -> int:
    """Create the blog collection if it doesn't exist."""
    logger.info("Creating blog collection...")
    asyncio.run(_init_db())
    logger.info("Blog collection ready")
    return 0


async def run_demo(client) -> list[str]:
    """Walk one blog through its whole lifecycle, returning what happened."""
    from schemas import Blog
    from services.blog_service import BlogServiceError

    steps: list[str] = []

    created = await client.create_blog(
        author_id="Apurv", title="My First Blog", content="My first blog contents"
    )
    steps.append(f"created {created.id}")

    try:
        await client.read_blog("sdnflsdnfkl")
    except BlogServiceError as e:
        steps.append(f"read malformed id -> {e.code}")

    read = await client.read_blog(created.id)
    steps.append(f"read {read.id}: {read.title}")

    updated = await client.update_blog(
        Blog(
            id=created.id,
            author_id="Apurv Sawant",
            title="My Second Blog",
            content="My second Blog content",
        )
    )
    steps.append(f"updated {updated.id}: {updated.title}")

    deleted = await client.delete_blog(created.id)
    steps.append(f"deleted {deleted}")

    try:
        await client.read_blog(created.id)
    except BlogServiceError as e:
        steps.append(f"read deleted id -> {e.code}")

    return steps


async def _with_client(base_url: str | None, func):
    from core.blog_client import BlogClient

    async with BlogClient(base_url) as client:
        return await func(client)


def cmd_demo(base_url: str | None) -> int:
    """Run the walkthrough against a running server."""
    from services.blog_service import BlogServiceError

    try:
        steps = asyncio.run(_with_client(base_url, run_demo))
    except BlogServiceError as e:
        logger.error(f"Demo failed: {e.code}: {e.message}")
        return 1

    for step in steps:
        logger.info(step)
    return 0


def _run_single(base_url: str | None, func) -> int:
    """Run one RPC and print its JSON result, or the error code on failure."""
    from services.blog_service import BlogServiceError

    try:
        result = asyncio.run(_with_client(base_url, func))
    except BlogServiceError as e:
        print(json.dumps({"code": str(e.code), "message": e.message}), file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Blog service CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--base-url", help="Server URL (default: CLIENT_BASE_URL)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve = subparsers.add_parser("serve", help="Run the RPC server")
    serve.add_argument("--host")
    serve.add_argument("--port", type=int)

    subparsers.add_parser("init-db", help="Create the blog collection and exit")
    subparsers.add_parser("demo", help="Run the lifecycle walkthrough")

    create = subparsers.add_parser("create", help="CreateBlog")
    update = subparsers.add_parser("update", help="UpdateBlog")
    update.add_argument("blog_id")
    for sub in (create, update):
        sub.add_argument("--author-id", required=True)
        sub.add_argument("--title", required=True)
        sub.add_argument("--content", required=True)

    read = subparsers.add_parser("read", help="ReadBlog")
    read.add_argument("blog_id")
    delete = subparsers.add_parser("delete", help="DeleteBlog")
    delete.add_argument("blog_id")

    args = parser.parse_args(argv)

    if args.command == "serve":
        return cmd_serve(args.host, args.port)
    elif args.command == "init-db":
        return cmd_init_db()
    elif args.command == "demo":
        return cmd_demo(args.base_url)
    elif args.command == "create":

        async def _create(client):
            blog = await client.create_blog(
                author_id=args.author_id, title=args.title, content=args.content
            )
            return blog.model_dump()

        return _run_single(args.base_url, _create)
    elif args.command == "read":

        async def _read(client):
            return (await client.read_blog(args.blog_id)).model_dump()

        return _run_single(args.base_url, _read)
    elif args.command == "update":
        from schemas import Blog

        async def _update(client):
            blog = Blog(
                id=args.blog_id,
                author_id=args.author_id,
                title=args.title,
                content=args.content,
            )
            return (await client.update_blog(blog)).model_dump()

        return _run_single(args.base_url, _update)
    elif args.command == "delete":

        async def _delete(client):
            return {"blog_id": await client.delete_blog(args.blog_id)}

        return _run_single(args.base_url, _delete)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
