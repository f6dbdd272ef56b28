"""
Command-line interface for the latest articles block.
"""
import sys
import json
import logging
import argparse
from dataclasses import asdict
from datetime import datetime
from typing import List, Optional
from dotenv import load_dotenv

from latest_articles.block import LatestArticlesBlock
from latest_articles.config import Config, resolve_config_path
from latest_articles.core.article import ARTICLE_TYPE, Article
from latest_articles.core.cache import RenderCache
from latest_articles.core.store import SqliteContentStore
from latest_articles.exceptions import ConfigFormError, LatestArticlesError

logger = logging.getLogger(__name__)

def parse_args(argv: Optional[List[str]] = None):
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="Latest Articles block")
    parser.add_argument(
        "--config",
        help="Path to configuration file (YAML or JSON), defaults to "
             "$LATEST_ARTICLES_CONFIG_PATH or latest_articles.yaml"
    )
    parser.add_argument("--db", help="Path to the content database")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    add = subparsers.add_parser("add", help="Add a content item")
    add.add_argument("--title", required=True, help="Item title")
    add.add_argument("--type", default=ARTICLE_TYPE, help="Content type")
    add.add_argument("--unpublished", action="store_true", help="Store the item unpublished")
    add.add_argument("--created", help="Creation time (ISO 8601), defaults to now")

    configure = subparsers.add_parser("configure", help="Configure the block")
    configure.add_argument("--num-articles", required=True, help="Number of articles to display")
    configure.add_argument("--cache-lifetime", required=True, help="Cache lifetime in seconds")

    render = subparsers.add_parser("render", help="Render the block")
    render.add_argument("--json", action="store_true", help="Print the render payload as JSON")
    render.add_argument("--no-cache", action="store_true", help="Bypass the render cache")

    return parser.parse_args(argv)

def add_article(args, store: SqliteContentStore) -> int:
    created = datetime.fromisoformat(args.created) if args.created else datetime.now()
    if created.tzinfo is None:
        created = created.astimezone()
    article = store.add(Article(
        title=args.title,
        type=args.type,
        status=not args.unpublished,
        created=created,
    ))
    logger.info(f"Added {article.type} {article.id}: {article.title}")
    print(article.id)
    return 0

def configure_block(args, config: Config, block: LatestArticlesBlock) -> int:
    try:
        block_config = block.block_submit({
            "num_articles": args.num_articles,
            "cache_lifetime": args.cache_lifetime,
        })
    except ConfigFormError as e:
        for field, message in e.errors.items():
            logger.error(f"{field}: {message}")
        return 1

    config.set("block", block_config.to_dict())
    if not config.save():
        return 1
    logger.info(f"Saved block configuration to {config.config_path}")
    return 0

def render_block(args, block: LatestArticlesBlock) -> int:
    if args.json:
        payload = block.build()
        payload["items"] = [asdict(item) for item in payload["items"]]
        print(json.dumps(payload, indent=2))
        return 0

    if args.no_cache:
        block.render_cache = None
    print(block.render())
    return 0

def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the command-line script.
    """
    load_dotenv(override=True)
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)]
    )

    config = Config(resolve_config_path(args.config))
    try:
        store = SqliteContentStore(args.db or config.get("store.path"))

        if args.command == "add":
            return add_article(args, store)

        block = LatestArticlesBlock(
            store,
            configuration=config.get("block", {}),
            render_cache=RenderCache(config.get("cache.path")),
        )
        if args.command == "configure":
            return configure_block(args, config, block)
        return render_block(args, block)
    except (LatestArticlesError, ValueError) as e:
        logger.error(f"An error occurred: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Process interrupted by user")
        return 1

if __name__ == "__main__":
    sys.exit(main())
