"""
Implementation of the optimized Paillier cryptosystem on plain integers.
"""

# Explicit re-export of all functionalities, such that they can be imported properly. Following
# https://www.python.org/dev/peps/pep-0484/#stub-files and
# https://mypy.readthedocs.io/en/stable/command_line.html#cmdoption-mypy-no-implicit-reexport
from tno.mpc.encryption_schemes.templates.encryption_scheme import (
    EncryptionSchemeWarning as EncryptionSchemeWarning,
)

from tno.mpc.encryption_schemes.paillier_integer.exceptions import (
    ConfigurationError as ConfigurationError,
)
from tno.mpc.encryption_schemes.paillier_integer.exceptions import (
    DomainError as DomainError,
)
from tno.mpc.encryption_schemes.paillier_integer.exceptions import (
    PaillierError as PaillierError,
)
from tno.mpc.encryption_schemes.paillier_integer.exceptions import (
    ResidueClass as ResidueClass,
)
from tno.mpc.encryption_schemes.paillier_integer.exceptions import (
    StateError as StateError,
)
from tno.mpc.encryption_schemes.paillier_integer.keys import (
    MAX_BIT_SIZE as MAX_BIT_SIZE,
)
from tno.mpc.encryption_schemes.paillier_integer.keys import (
    MIN_BIT_SIZE as MIN_BIT_SIZE,
)
from tno.mpc.encryption_schemes.paillier_integer.keys import (
    PaillierPrivateKey as PaillierPrivateKey,
)
from tno.mpc.encryption_schemes.paillier_integer.keys import (
    PaillierPublicKey as PaillierPublicKey,
)
from tno.mpc.encryption_schemes.paillier_integer.keys import (
    generate_key_material as generate_key_material,
)
from tno.mpc.encryption_schemes.paillier_integer.paillier import (
    PaillierCryptosystem as PaillierCryptosystem,
)
from tno.mpc.encryption_schemes.paillier_integer.paillier import (
    RandomSource as RandomSource,
)
from tno.mpc.encryption_schemes.paillier_integer.residues import (
    ResidueValidator as ResidueValidator,
)

__version__ = "1.0.0"
