"""
The latest articles block.

Lists the most recently published articles as links. The block is configured
with the number of articles to show and the number of seconds its rendered
output may be cached for.
"""
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from latest_articles.core.article import ARTICLE_TYPE
from latest_articles.core.cache import PERMANENT, RenderCache
from latest_articles.core.store import ContentStore
from latest_articles.exceptions import ArticleNotFoundError, ConfigFormError
from latest_articles.formatters.html import item_list_markup, link_markup

logger = logging.getLogger(__name__)

PLUGIN_ID = "latest_articles_block"
ADMIN_LABEL = "Latest Articles"

FORM_TITLES = {
    "num_articles": "Number of Articles to Display",
    "cache_lifetime": "Cache Lifetime (in seconds)",
}
FORM_MINIMUMS = {
    "num_articles": 1,
    "cache_lifetime": 0,
}

def _coerce_int(value: Any) -> int:
    """Parse a whole number from an int or a numeric string, raising ValueError otherwise."""
    if isinstance(value, bool):
        raise ValueError(f"Not a whole number: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value.strip())
    raise ValueError(f"Not a whole number: {value!r}")

@dataclass
class BlockConfig:
    """
    Configuration of a latest articles block.
    """
    num_articles: int = 5
    cache_lifetime: int = 3600

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "BlockConfig":
        """
        Build a configuration from stored values, falling back to defaults.

        Raises:
            ValueError: If a value is not an integer or the cache lifetime is
                below PERMANENT
        """
        defaults = cls()
        config = cls(
            num_articles=_coerce_int(values.get("num_articles", defaults.num_articles)),
            cache_lifetime=_coerce_int(values.get("cache_lifetime", defaults.cache_lifetime)),
        )
        if config.cache_lifetime < PERMANENT:
            raise ValueError(f"Invalid cache lifetime: {config.cache_lifetime}")
        return config

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

@dataclass(frozen=True)
class RenderItem:
    """
    A single entry of the rendered list.
    """
    title: str
    url: str
    markup: str

class LatestArticlesBlock:
    """
    Block listing the latest published articles.
    """
    plugin_id = PLUGIN_ID
    admin_label = ADMIN_LABEL

    def __init__(
        self,
        store: ContentStore,
        configuration: Optional[Union[BlockConfig, Mapping[str, Any]]] = None,
        render_cache: Optional[RenderCache] = None,
    ):
        """
        Initialize the block.

        Args:
            store: Content store the articles are read from
            configuration: Block configuration, defaults are used when omitted
            render_cache: Optional cache for rendered output
        """
        self.store = store
        self.render_cache = render_cache
        if configuration is None:
            configuration = self.default_configuration()
        if not isinstance(configuration, BlockConfig):
            configuration = BlockConfig.from_dict(configuration)
        self.configuration = configuration

    @staticmethod
    def default_configuration() -> Dict[str, int]:
        return BlockConfig().to_dict()

    def block_form(self) -> Dict[str, Dict[str, Any]]:
        """
        Describe the configuration form.

        Returns:
            Dict mapping field names to their form element definitions
        """
        return {
            name: {
                "type": "textfield",
                "title": title,
                "default_value": getattr(self.configuration, name),
                "required": True,
            }
            for name, title in FORM_TITLES.items()
        }

    def block_submit(self, values: Mapping[str, Any]) -> BlockConfig:
        """
        Apply a configuration form submission.

        Both fields are required and must be whole numbers; surrounding
        whitespace is ignored. Nothing is changed if any field is rejected.

        Args:
            values: Submitted form values keyed by field name

        Returns:
            The new block configuration

        Raises:
            ConfigFormError: If any submitted value is missing or invalid
        """
        errors = {}
        parsed = {}

        for name, title in FORM_TITLES.items():
            raw = values.get(name)
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                errors[name] = f"{title} field is required."
                continue
            try:
                number = _coerce_int(raw)
            except ValueError:
                errors[name] = f"{title} must be a whole number."
                continue
            if number < FORM_MINIMUMS[name]:
                errors[name] = f"{title} must be at least {FORM_MINIMUMS[name]}."
                continue
            parsed[name] = number

        if errors:
            logger.warning(f"Rejected configuration for {self.plugin_id}: {errors}")
            raise ConfigFormError(errors)

        new_configuration = BlockConfig(**parsed)
        if self.render_cache is not None:
            # Output built under earlier settings must not outlive them
            self.render_cache.delete(self._cache_id_for(self.configuration))
            self.render_cache.delete(self._cache_id_for(new_configuration))
        self.configuration = new_configuration
        logger.info(f"Updated {self.plugin_id} configuration: {self.configuration}")
        return self.configuration

    def get_cache_max_age(self) -> int:
        return self.configuration.cache_lifetime

    def _latest_items(self) -> List[RenderItem]:
        number_of_articles = self.configuration.num_articles
        if number_of_articles < 1:
            logger.warning(f"{self.plugin_id} configured with {number_of_articles} articles, nothing to list")
            return []

        ids = self.store.query(
            {"status": True, "type": ARTICLE_TYPE},
            sort=("created", "DESC"),
            limit=number_of_articles,
            access_check=True,
        )

        items = []
        for article_id in ids:
            try:
                article = self.store.load(article_id)
            except ArticleNotFoundError:
                # Deleted between the query and the load
                logger.warning(f"Article {article_id} disappeared before it could be listed")
                continue
            items.append(RenderItem(title=article.title, url=article.url, markup=link_markup(article)))
        return items

    def build(self) -> Dict[str, Any]:
        """
        Build the render payload.

        Returns:
            Dict with the list theme, the rendered items and the cache max-age
        """
        return {
            "theme": "item_list",
            "items": self._latest_items(),
            "cache": {
                "max_age": self.get_cache_max_age(),
            },
        }

    def _cache_id_for(self, configuration: BlockConfig) -> str:
        return f"{self.plugin_id}:{configuration.num_articles}"

    @property
    def cache_id(self) -> str:
        return self._cache_id_for(self.configuration)

    def render(self) -> str:
        """
        Render the block to HTML, using the render cache when attached.

        Returns:
            HTML of the article list
        """
        if self.render_cache is not None:
            cached = self.render_cache.get(self.cache_id)
            if cached is not None:
                return cached

        payload = self.build()
        html = item_list_markup(item.markup for item in payload["items"])

        if self.render_cache is not None:
            self.render_cache.set(self.cache_id, html, payload["cache"]["max_age"])
        return html
