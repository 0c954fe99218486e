"""SehatSaathi streaming health-chat client."""
