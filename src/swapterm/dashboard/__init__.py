"""Chart API served alongside the terminal."""
