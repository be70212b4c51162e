#!/usr/bin/env python3
"""
Names, images, ports and defaults for the local Elastic stack.

CRITICAL: This is the SINGLE SOURCE OF TRUTH for container names, image
repositories and Kibana endpoint paths. Other modules import from here
instead of repeating hardcoded strings.
"""

# ============================================================================
# Stack defaults
# ============================================================================

DEFAULT_STACK_VERSION = '7.17.0'
DEFAULT_USERNAME = 'elastic'
DEFAULT_PASSWORD = 'password'
DEFAULT_NETWORK_NAME = 'elastic'

# Optional TOML file picked up from the current directory
CONFIG_FILENAME = 'elastic-container.toml'

# ============================================================================
# Containers (name -> image repository, tag is the stack version)
# ============================================================================

ELASTICSEARCH_CONTAINER = 'elasticsearch'
KIBANA_CONTAINER = 'kibana'
FLEET_SERVER_CONTAINER = 'fleet-server'

ELASTICSEARCH_IMAGE = 'docker.elastic.co/elasticsearch/elasticsearch'
KIBANA_IMAGE = 'docker.elastic.co/kibana/kibana'
ELASTIC_AGENT_IMAGE = 'docker.elastic.co/beats/elastic-agent'

ELASTICSEARCH_PORTS = (9200, 9300)
KIBANA_PORT = 5601
FLEET_SERVER_PORT = 8220

# Start order; stop walks it backwards
START_ORDER = [ELASTICSEARCH_CONTAINER, KIBANA_CONTAINER, FLEET_SERVER_CONTAINER]

# ============================================================================
# URLs
# ============================================================================

# Inside the docker network
ELASTICSEARCH_URL = f'http://{ELASTICSEARCH_CONTAINER}:{ELASTICSEARCH_PORTS[0]}'
KIBANA_URL = f'http://{KIBANA_CONTAINER}:{KIBANA_PORT}'
FLEET_URL = f'http://{FLEET_SERVER_CONTAINER}:{FLEET_SERVER_PORT}'

# From the host
LOCAL_ES_URL = f'http://127.0.0.1:{ELASTICSEARCH_PORTS[0]}'
LOCAL_KBN_URL = f'http://127.0.0.1:{KIBANA_PORT}'

# ============================================================================
# Kibana
# ============================================================================

KIBANA_CONFIG_FILENAME = 'kibana.yml'
KIBANA_CONFIG_TEMPLATE = 'kibana.yml.j2'
KIBANA_CONFIG_MOUNT = '/usr/share/kibana/config/kibana.yml'

DETECTION_ENGINE_INDEX_PATH = '/api/detection_engine/index'
PREPACKAGED_RULES_PATH = '/api/detection_engine/rules/prepackaged'

# Kibana answers / with a redirect to the login page once it is initialized
READY_STATUS_CODE = 302
XSRF_HEADER_VALUE = 'kibana'

DEFAULT_MAX_TRIES = 15
DEFAULT_RETRY_DELAY = 40.0
DEFAULT_REQUEST_TIMEOUT = 30.0


def image_for(repository: str, version: str) -> str:
    """
    Build a fully qualified image reference.

    Examples:
        >>> image_for(KIBANA_IMAGE, '7.17.0')
        'docker.elastic.co/kibana/kibana:7.17.0'
    """
    return f'{repository}:{version}'
