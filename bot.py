"""
UMass Dining Bot - run with `python bot.py [--no-telegram] [--no-discord]`
"""
from dining_bot.app import main


if __name__ == '__main__':
    main()
