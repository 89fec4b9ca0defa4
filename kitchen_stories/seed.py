"""Sample catalog inserted on first start.

Idempotent: nothing is inserted when the recipes table already has rows.
"""

import logging

from .repository import RecipeRepository
from .schemas import IngredientGroupIn, RecipeFields

logger = logging.getLogger("kitchen_stories.seed")


SAMPLE_RECIPES = [
    {
        "title": "Fluffy Buttermilk Pancakes",
        "description": "Light, airy pancakes with a golden exterior and tender interior. Perfect weekend breakfast tradition.",
        "category": "breakfast",
        "difficulty": "Easy",
        "prep_time": "10 mins",
        "cook_time": "15 mins",
        "servings": "4 servings",
        "is_favorite": True,
        "notes": "For extra fluffy pancakes, let the batter rest for 5 minutes before cooking. You can also add blueberries or chocolate chips to the batter for variation.",
        "ingredients": [
            {
                "group": "Dry Ingredients",
                "items": [
                    "2 cups all-purpose flour",
                    "2 tablespoons sugar",
                    "2 teaspoons baking powder",
                    "1 teaspoon baking soda",
                    "1/2 teaspoon salt",
                ],
            },
            {
                "group": "Wet Ingredients",
                "items": [
                    "2 cups buttermilk",
                    "2 large eggs",
                    "1/4 cup melted butter",
                    "1 teaspoon vanilla extract",
                ],
            },
        ],
        "instructions": [
            "In a large bowl, whisk together flour, sugar, baking powder, baking soda, and salt.",
            "In a separate bowl, whisk together buttermilk, eggs, melted butter, and vanilla extract.",
            "Pour wet ingredients into dry ingredients and gently fold together until just combined. Don't overmix, some lumps are okay.",
            "Heat a griddle or large skillet over medium heat. Lightly grease with butter.",
            "Pour 1/4 cup batter for each pancake. Cook until bubbles form on the surface, about 2-3 minutes.",
            "Flip and cook until golden brown on the other side, about 1-2 minutes more.",
            "Serve immediately with butter and maple syrup.",
        ],
    },
    {
        "title": "Garlic Herb Roasted Chicken",
        "description": "Juicy roasted chicken infused with fresh herbs and garlic. A family favorite that never disappoints.",
        "category": "dinner",
        "difficulty": "Medium",
        "prep_time": "15 mins",
        "cook_time": "75 mins",
        "servings": "6 servings",
        "is_favorite": True,
        "notes": "The key to crispy skin is starting with a completely dry chicken. Make sure to pat it thoroughly with paper towels before seasoning.",
        "ingredients": [
            {
                "group": "Main",
                "items": [
                    "1 whole chicken (4-5 lbs)",
                    "6 cloves garlic, minced",
                    "2 tablespoons olive oil",
                    "2 tablespoons butter, softened",
                    "1 lemon, halved",
                ],
            },
            {
                "group": "Herbs & Seasoning",
                "items": [
                    "2 tablespoons fresh rosemary, chopped",
                    "2 tablespoons fresh thyme",
                    "1 tablespoon fresh sage, chopped",
                    "2 teaspoons salt",
                    "1 teaspoon black pepper",
                ],
            },
        ],
        "instructions": [
            "Preheat oven to 425°F (220°C). Pat chicken dry with paper towels.",
            "In a small bowl, mix together garlic, olive oil, butter, rosemary, thyme, sage, salt, and pepper.",
            "Gently loosen the skin from the chicken breast and thighs. Spread half the herb mixture under the skin.",
            "Rub remaining herb mixture all over the outside of the chicken. Place lemon halves inside the cavity.",
            "Tie legs together with kitchen twine and tuck wing tips under the body.",
            "Place chicken breast-side up in a roasting pan. Roast for 60-75 minutes until internal temperature reaches 165°F.",
            "Let rest for 10-15 minutes before carving. Serve with pan juices.",
        ],
    },
    {
        "title": "Classic Chocolate Chip Cookies",
        "description": "Crispy edges with a chewy center. The ultimate comfort food from grandma's recipe box.",
        "category": "dessert",
        "difficulty": "Easy",
        "prep_time": "15 mins",
        "cook_time": "12 mins",
        "servings": "24 cookies",
        "is_favorite": False,
        "notes": "For chewier cookies, slightly underbake them. For crispier cookies, bake an extra 1-2 minutes. Cookies will continue to cook on the hot baking sheet after removing from oven.",
        "ingredients": [
            {
                "group": "",
                "items": [
                    "2 1/4 cups all-purpose flour",
                    "1 teaspoon baking soda",
                    "1 teaspoon salt",
                    "1 cup (2 sticks) butter, softened",
                    "3/4 cup granulated sugar",
                    "3/4 cup packed brown sugar",
                    "2 large eggs",
                    "2 teaspoons vanilla extract",
                    "2 cups chocolate chips",
                ],
            },
        ],
        "instructions": [
            "Preheat oven to 375°F (190°C). Line baking sheets with parchment paper.",
            "In a medium bowl, whisk together flour, baking soda, and salt.",
            "In a large bowl, cream together softened butter, granulated sugar, and brown sugar until light and fluffy, about 3 minutes.",
            "Beat in eggs one at a time, then add vanilla extract.",
            "Gradually mix in the flour mixture until just combined.",
            "Fold in chocolate chips.",
            "Drop rounded tablespoons of dough onto prepared baking sheets, spacing 2 inches apart.",
            "Bake for 10-12 minutes until edges are golden brown. Centers will look slightly underdone.",
            "Cool on baking sheet for 5 minutes before transferring to a wire rack.",
        ],
    },
]


def seed_sample_recipes(repo: RecipeRepository) -> int:
    """Insert SAMPLE_RECIPES into an empty catalog. Returns the number created."""
    if repo.count() > 0:
        return 0

    logger.info("Inserting sample recipes...")
    created = 0
    for data in SAMPLE_RECIPES:
        fields = RecipeFields(
            title=data["title"],
            description=data["description"],
            category=data["category"],
            difficulty=data["difficulty"],
            prep_time=data["prep_time"],
            cook_time=data["cook_time"],
            servings=data["servings"],
            notes=data.get("notes"),
        )
        repo.create(
            fields,
            [IngredientGroupIn(**g) for g in data["ingredients"]],
            list(data["instructions"]),
            is_favorite=data.get("is_favorite", False),
        )
        created += 1

    logger.info(f"Sample recipes inserted: {created}")
    return created
