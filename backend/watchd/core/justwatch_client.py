import logging
from typing import Any, Dict, List, Optional

import requests

from .interfaces import AvailabilityClientInterface, AvailabilityError, JustWatchConfig

logger = logging.getLogger(__name__)

# Country, language and platform are GraphQL enum literals; JustWatch does not
# accept them as typed variables, so they are formatted into the query text.
SEARCH_TITLE_QUERY = """
query SearchTitle($title: String!) {{
  searchTitles(filter: {{ searchQuery: $title }}, source: "TMDB", country: {country}, language: {language}, first: 5) {{
    edges {{
      node {{
        id
        content(country: {country}, language: {language}) {{
          title
          originalReleaseYear
        }}
      }}
    }}
  }}
}}
"""

OFFERS_QUERY = """
query GetOffers($nodeId: ID!) {{
  node(id: $nodeId) {{
    ... on Movie {{
      offers(country: {country}, platform: WEB) {{
        monetizationType
        presentationType
        package {{
          clearName
          icon
        }}
      }}
    }}
  }}
}}
"""


class JustWatchClient(AvailabilityClientInterface):
    """GraphQL client for JustWatch title search and offers"""

    def __init__(self, config: JustWatchConfig, session: requests.Session = None):
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def graphql_request(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = self.session.post(
                self.config.url,
                json={"query": query, "variables": variables or {}},
                timeout=self.config.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise AvailabilityError(f"JustWatch request failed: {str(e)}")

        if response.status_code != 200:
            raise AvailabilityError(
                f"JustWatch request failed: {response.status_code}", response.status_code
            )
        try:
            return response.json()
        except ValueError as e:
            raise AvailabilityError(f"Invalid JSON from JustWatch: {str(e)}", response.status_code)

    def find_node_id(self, title: str, release_year: int) -> Optional[str]:
        """Return the JustWatch node id for a title, preferring an exact release year"""
        query = SEARCH_TITLE_QUERY.format(
            country=self.config.country.upper(), language=self.config.language.lower()
        )
        result = self.graphql_request(query, {"title": title})
        edges = ((result.get("data") or {}).get("searchTitles") or {}).get("edges") or []

        for edge in edges:
            content = (edge.get("node") or {}).get("content") or {}
            if content.get("originalReleaseYear") == release_year:
                return edge["node"]["id"]
        if edges:
            return (edges[0].get("node") or {}).get("id")
        return None

    def get_offers(self, node_id: str) -> List[Dict[str, Any]]:
        """Return the raw offers of a JustWatch node"""
        query = OFFERS_QUERY.format(country=self.config.country.upper())
        result = self.graphql_request(query, {"nodeId": node_id})
        node = (result.get("data") or {}).get("node") or {}
        return node.get("offers") or []
