"""BYOK Vault Meta information.
   BYOK Vault keeps user-supplied AI provider keys encrypted at rest.
"""
__title__ = 'byok_vault'
__description__ = (
   'BYOK Vault keeps user-supplied AI provider keys encrypted at rest '
   'and decrypts them only for a single outbound call.'
)
__version__ = '0.1.0'
__copyright__ = 'Copyright (c) 2026 BYOK Vault Authors'
__author__ = 'BYOK Vault Authors'
__author_email__ = 'maintainers@byok-vault.dev'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/byok-vault/byok-vault'
