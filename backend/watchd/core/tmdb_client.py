import requests
import logging
from typing import Dict
from .interfaces import TMDBClientInterface, TMDBResponse, TMDBConfig, TMDBError

logger = logging.getLogger(__name__)

class TMDBClient(TMDBClientInterface):
    """Concrete implementation of TMDB client"""

    def __init__(self, config: TMDBConfig, session: requests.Session = None):
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({
            "accept": "application/json"
        })

    def make_request(self, endpoint: str, params: Dict = None) -> TMDBResponse:
        """Make HTTP request to TMDB API"""
        url = f"{self.config.base_url}/{endpoint.lstrip('/')}"
        params = dict(params or {})
        params['api_key'] = self.config.api_key

        if self.config.language and 'language' not in params:
            params['language'] = self.config.language

        try:
            logger.debug(f"Making request to: {url}")
            response = self.session.get(url, params=params, timeout=self.config.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Request exception for {endpoint}: {str(e)}")
            raise TMDBError(f"Request failed: {str(e)}")

        if response.status_code != 200:
            logger.error(f"API request failed: {endpoint} {response.status_code}")
            return TMDBResponse({}, response.status_code, False)

        try:
            return TMDBResponse(response.json(), response.status_code, True)
        except ValueError as e:
            raise TMDBError(f"Invalid JSON from TMDB: {str(e)}", response.status_code)
