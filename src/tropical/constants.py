BOARD_SIZE = 8
MIN_MATCH_LENGTH = 3

# Placeholder type for a cell emptied by a match, pending gravity-fall and refill.
MATCH_SYMBOL = '⭐️'

# Spawnable gem kinds, in draw order.
GEM_TYPES = ('🥥', '🍉', '🥝', '🍓', '🍍', '🍋')

# Pacing (seconds) used by the tick-driven PacingSystem.
# The revert of an invalid swap and the first resolution step wait DELAY_DEFAULT;
# every further cascade step waits DELAY_AFTER_STARS_APPEAR.
DELAY_DEFAULT = 3.0
DELAY_AFTER_STARS_APPEAR = 1.0

MESSAGE_MATCH_FOUND = '⭐️⭐️⭐️ Nice! You found a match!'
MESSAGE_INVALID_SWAP = "❌ That swap doesn't result in a match, please try again."
MESSAGE_WELCOME = """
  Welcome to Tropical!
  🥥 Your goal is to match 3 or more of the same item
  🍉 Make matches by swapping 2 items
  🥝 Select two items to swap them
"""
