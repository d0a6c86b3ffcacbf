"""SwipeChef API: recipes, likes, households and meal planning."""
