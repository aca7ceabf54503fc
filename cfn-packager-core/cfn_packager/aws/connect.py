"""
boto3 client creation for the object-storage services used while packaging templates.
"""

import logging
import threading
from functools import lru_cache
from typing import Optional

from boto3.session import Session
from botocore.client import BaseClient
from botocore.config import Config

from cfn_packager import config as packager_config

LOG = logging.getLogger(__name__)


class ClientFactory:
    """
    Creates boto3 clients from a boto3 session. Credentials and region are resolved by boto3 (env variables,
    profiles, instance metadata, ...) unless explicitly given.
    """

    def __init__(self, session: Session = None, config: Config = None):
        self._session = session or Session()
        self._config = config or Config()
        self._create_client_lock = threading.Lock()

    def __call__(
        self,
        service_name: str,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        config: Optional[Config] = None,
    ) -> BaseClient:
        return self._get_client(
            service_name=service_name,
            region_name=region_name or packager_config.AWS_REGION or self._session.region_name,
            endpoint_url=endpoint_url or packager_config.AWS_ENDPOINT_URL,
            config=config or self._config,
        )

    # TODO @lru_cache keeps a reference to `self`, factories are never garbage collected
    @lru_cache(maxsize=64)
    def _get_client(
        self,
        service_name: str,
        region_name: Optional[str],
        endpoint_url: Optional[str],
        config: Config,
    ) -> BaseClient:
        """
        Returns a boto3 client with the given configuration. This is a cached call, so modifications to the
        used client will affect others. Client creation is behind a lock as it is not generally thread safe.

        :param service_name: Service to build the client for, eg. `s3`
        :param region_name: Name of the AWS region to be associated with the client
            If set to None, loads from botocore session.
        :param endpoint_url: Full endpoint URL to be used by the client, `None` for the AWS default.
        :param config: Boto config for advanced use.
        :return: Boto3 client.
        """
        LOG.debug("Creating %s client (region=%s, endpoint=%s)", service_name, region_name, endpoint_url)
        with self._create_client_lock:
            return self._session.client(
                service_name=service_name,
                region_name=region_name,
                endpoint_url=endpoint_url,
                config=config,
            )


connect_to = ClientFactory()
