"""Service layer helpers"""

from .address import SuiAddressValidator, is_valid_sui_address, normalize_sui_address
