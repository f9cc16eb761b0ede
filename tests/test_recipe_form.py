"""Tests for the tag/ingredient collections and the recipe form."""

from werkzeug.datastructures import MultiDict

from services.recipe_form import TagList, IngredientList, RecipeForm


# ============================================
# TAGS
# ============================================

def test_tag_addition_ignores_case_duplicates():
    tags = TagList()
    assert tags.add('vegan') is True
    assert tags.add('Vegan') is False
    assert tags.add('  VEGAN ') is False
    assert tags.to_list() == ['vegan']


def test_tags_keep_insertion_order():
    tags = TagList(['Quick', 'dinner', 'Pasta'])
    assert tags.to_list() == ['quick', 'dinner', 'pasta']


def test_empty_tags_are_not_added():
    tags = TagList()
    assert tags.add('') is False
    assert tags.add('   ') is False
    assert tags.add('<b></b>') is False
    assert len(tags) == 0


def test_tags_are_sanitized_and_bounded():
    tags = TagList(['<script>x</script>Spicy', 'a' * 40])
    assert tags.to_list() == ['spicy', 'a' * 20]


def test_remove_tag_by_value():
    tags = TagList(['quick', 'vegan', 'soup'])
    assert tags.remove('vegan') is True
    assert tags.remove('vegan') is False
    assert tags.to_list() == ['quick', 'soup']
    assert 'Quick' in tags


# ============================================
# INGREDIENTS
# ============================================

def test_new_ingredient_row_defaults_to_grams():
    ingredients = IngredientList()
    ingredients.add()
    assert ingredients.to_list() == [{'name': '', 'amount': '', 'unit': 'g'}]


def test_ingredient_rows_are_sanitized():
    ingredients = IngredientList([
        {'name': '<i>Flour</i>', 'amount': '12a.3.4', 'unit': 'grams please'},
    ])
    assert ingredients[0] == {'name': 'Flour', 'amount': '12.3.4', 'unit': 'grams plea'}


def test_remove_ingredient_by_index():
    ingredients = IngredientList([
        {'name': 'flour', 'amount': '200', 'unit': 'g'},
        {'name': 'salt', 'amount': '1', 'unit': 'tsp'},
        {'name': 'water', 'amount': '150', 'unit': 'ml'},
    ])

    assert ingredients.remove(1) is True
    assert [row['name'] for row in ingredients] == ['flour', 'water']

    assert ingredients.remove(5) is False
    assert ingredients.remove(-1) is False
    assert len(ingredients) == 2


def test_update_ingredient_field():
    ingredients = IngredientList()
    ingredients.add()
    ingredients.update(0, 'amount', '1/2 cup')
    ingredients.update(0, 'name', 'Milk<br>')
    assert ingredients[0] == {'name': 'Milk', 'amount': '12', 'unit': 'g'}


# ============================================
# FORM
# ============================================

def _form_data(**overrides):
    data = MultiDict([
        ('name', '  <b>Tomato Soup</b> '),
        ('instructions', 'Simmer.<script>alert(1)</script>\nBlend.'),
        ('ingredient_name', 'Tomatoes'),
        ('ingredient_amount', '500'),
        ('ingredient_unit', 'g'),
        ('ingredient_name', 'Salt'),
        ('ingredient_amount', ''),
        ('ingredient_unit', 'pinch'),
        ('tags', 'Soup'),
        ('tags', 'soup'),
        ('tags', 'Vegan'),
        ('is_public', 'on'),
    ])
    for key, value in overrides.items():
        data.setlist(key, value if isinstance(value, list) else [value])
    return data


def test_form_sanitizes_every_field():
    form = RecipeForm.from_form(_form_data())

    assert form.name == 'Tomato Soup'
    assert form.instructions == 'Simmer.\nBlend.'
    assert form.tags.to_list() == ['soup', 'vegan']
    assert form.is_public is True
    assert form.errors() == []


def test_record_fills_missing_amounts():
    record = RecipeForm.from_form(_form_data()).to_record()

    assert record['ingredients'] == [
        {'name': 'Tomatoes', 'amount': '500', 'unit': 'g'},
        {'name': 'Salt', 'amount': '0', 'unit': 'pinch'},
    ]
    assert record['tags'] == ['soup', 'vegan']
    assert record['photo_url'] is None


def test_form_never_takes_photo_from_submitted_data():
    data = _form_data(photo_url='javascript:alert(1)')
    form = RecipeForm.from_form(data, photo_url='data:image/jpeg;base64,/9j/')
    assert form.photo_url == 'data:image/jpeg;base64,/9j/'

    assert RecipeForm.from_form(data).photo_url is None


def test_form_errors():
    form = RecipeForm.from_form(_form_data(name='<script>x</script>', instructions='   ',
                                           ingredient_name=['Tomatoes', '']))
    assert form.errors() == [
        'Recipe name is required',
        'Instructions are required',
        'Every ingredient needs a name',
    ]


def test_unchecked_public_flag():
    data = _form_data()
    del data['is_public']
    assert RecipeForm.from_form(data).is_public is False


def test_empty_form_has_one_blank_ingredient():
    form = RecipeForm.empty()
    assert len(form.ingredients) == 1
    assert form.tags.to_list() == []
    assert form.photo_url is None
