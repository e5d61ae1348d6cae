"""Protocol constants for the reserve engine.

Centralizes the bonding-curve parameters. ``EngineConfig`` defaults are
taken from here.
"""

# Base-asset units (MIST) per whole base-asset coin; also the fixed-point
# scale for prices (base-asset units per token, times PRICE_SCALE)
PRICE_SCALE = 10**9

# Tokens minted per base-asset unit on the bootstrap mint
INITIAL_MINT_RATE = 1000

# Smallest deposit, and smallest gross burn payout, in base-asset units
MIN_TRADE = 1000

# Each fee leg is amount // FEE_DIVISOR (0.05% to the collector,
# 0.05% kept in backing, 0.1% total)
FEE_DIVISOR = 2000

# Price reported while supply is zero; equals the bootstrap rate
INITIAL_PRICE = PRICE_SCALE // INITIAL_MINT_RATE
