"""Built-in recipes served when the user's recipes can't be loaded (offline/dev)."""

from datetime import datetime, timezone

from swipechef.models.entities import Difficulty, Ingredient, MealType, Recipe

SAMPLE_OWNER_ID = "sample"

SAMPLE_RECIPES: list[Recipe] = [
    Recipe(
        id="sample-1",
        owner_id=SAMPLE_OWNER_ID,
        title="Spaghetti Carbonara",
        description="Creamy Roman pasta with eggs, pecorino and guanciale.",
        meal_type=MealType.DINNER,
        ingredients=[
            Ingredient(id="sample-1-1", name="Spaghetti", quantity="400", unit="g"),
            Ingredient(id="sample-1-2", name="Guanciale", quantity="150", unit="g"),
            Ingredient(id="sample-1-3", name="Eggs", quantity="4", unit=""),
            Ingredient(id="sample-1-4", name="Pecorino romano", quantity="80", unit="g"),
        ],
        steps=[
            "Cook the spaghetti in salted water.",
            "Brown the guanciale in a dry pan.",
            "Whisk eggs with the grated pecorino.",
            "Toss pasta with guanciale off the heat, then stir in the egg mixture.",
        ],
        prep_time=10,
        cook_time=15,
        servings=4,
        difficulty=Difficulty.MEDIUM,
        category="Pasta",
        created_at=datetime(2024, 1, 3, tzinfo=timezone.utc),
    ),
    Recipe(
        id="sample-2",
        owner_id=SAMPLE_OWNER_ID,
        title="Overnight Oats",
        description="No-cook breakfast prepared the night before.",
        meal_type=MealType.BREAKFAST,
        ingredients=[
            Ingredient(id="sample-2-1", name="Rolled oats", quantity="1/2", unit="cup"),
            Ingredient(id="sample-2-2", name="Milk", quantity="1/2", unit="cup"),
            Ingredient(id="sample-2-3", name="Greek yogurt", quantity="1/4", unit="cup"),
            Ingredient(id="sample-2-4", name="Honey", quantity="1", unit="tbsp"),
        ],
        steps=[
            "Stir everything together in a jar.",
            "Refrigerate overnight and top with fruit.",
        ],
        prep_time=5,
        cook_time=0,
        servings=1,
        difficulty=Difficulty.EASY,
        category="Breakfast",
        created_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
    ),
    Recipe(
        id="sample-3",
        owner_id=SAMPLE_OWNER_ID,
        title="Apple & Peanut Butter",
        description="Sliced apple with a spoon of peanut butter.",
        meal_type=MealType.SNACK,
        is_simple=True,
        servings=1,
        difficulty=Difficulty.EASY,
        category="Snack",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    ),
]
