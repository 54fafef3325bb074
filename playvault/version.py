"""PlayVault Meta information.
   PlayVault reads and writes password-encrypted vault containers
   embedded in playbooks, inventories and variable files.
"""
__title__ = 'playvault'
__description__ = (
   'PlayVault reads and writes password-encrypted vault containers '
   'embedded in playbooks, inventories and variable files.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2024 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/phenobarbital/playvault'
