"""
HTML rendering utilities for the latest articles block.
"""
import logging
from typing import Iterable

from bs4 import BeautifulSoup

from latest_articles.core.article import Article

# Configure logging
logger = logging.getLogger(__name__)

def link_markup(article: Article) -> str:
    """
    Build the anchor linking to an article.

    Args:
        article: The article to link to

    Returns:
        HTML anchor with the article title as text
    """
    soup = BeautifulSoup("", "html.parser")
    anchor = soup.new_tag("a", href=article.url, hreflang=article.langcode)
    anchor.string = article.title
    return str(anchor)

def item_list_markup(items: Iterable[str]) -> str:
    """
    Wrap markup fragments in an item list.

    Args:
        items: HTML fragments, one per list item

    Returns:
        HTML for the whole list
    """
    soup = BeautifulSoup("", "html.parser")
    wrapper = soup.new_tag("div", attrs={"class": "item-list"})
    ul = soup.new_tag("ul")
    wrapper.append(ul)

    for markup in items:
        li = soup.new_tag("li")
        # Fragments are already HTML, parse them rather than escaping
        for node in list(BeautifulSoup(markup, "html.parser").contents):
            li.append(node)
        ul.append(li)

    return str(wrapper)
