import uuid

import pytest

from octonius import schemas
from octonius.errors import NotFoundError
from octonius.schema.enums import FieldType
from octonius.services import CustomFieldService, GroupService, TaskService
from octonius.services.custom_fields import validate_field_value


@pytest.fixture()
def group(session, settings, owner, workplace):
    return GroupService(session, settings).create_group(
        workplace.id, schemas.GroupCreateRequest(name="Ops"), owner.id
    )


@pytest.fixture()
def task(session, settings, owner, group):
    tasks = TaskService(session, settings)
    column = tasks.get_board(group.id, owner.id)[0]
    return tasks.create_task(
        group.id, schemas.TaskCreateRequest(title="Audit", column_id=column.id), owner.id
    )


@pytest.fixture()
def fields(session, settings) -> CustomFieldService:
    return CustomFieldService(session, settings)


@pytest.mark.parametrize(
    "field_type, raw, expected",
    [
        (FieldType.TEXT, "  hello ", "hello"),
        (FieldType.NUMBER, "3.5", "3.5"),
        (FieldType.BOOLEAN, "Yes", "true"),
        (FieldType.BOOLEAN, "0", "false"),
        (FieldType.DATE, "2024-02-29T10:00:00Z", "2024-02-29T10:00:00Z"),
    ],
)
def test_validate_field_value_accepts(field_type, raw, expected):
    assert validate_field_value(field_type, raw) == expected


@pytest.mark.parametrize(
    "field_type, raw, options",
    [
        (FieldType.NUMBER, "three", None),
        (FieldType.BOOLEAN, "maybe", None),
        (FieldType.DATE, "31/12/2024", None),
        (FieldType.DROPDOWN, "purple", ["red", "green"]),
    ],
)
def test_validate_field_value_rejects(field_type, raw, options):
    with pytest.raises(ValueError):
        validate_field_value(field_type, raw, options)


def test_definitions_get_sequential_display_order(fields, group, owner):
    first = fields.create_definition(
        group.id, schemas.FieldDefinitionCreateRequest(name="Budget", type=FieldType.NUMBER), owner.id
    )
    second = fields.create_definition(
        group.id,
        schemas.FieldDefinitionCreateRequest(
            name="Stage", type=FieldType.DROPDOWN, options=["plan", "build"]
        ),
        owner.id,
    )

    assert (first.display_order, second.display_order) == (0, 1)
    assert [d.name for d in fields.list_definitions(group.id, owner.id)] == ["Budget", "Stage"]


def test_dropdown_definition_requires_options(fields, group, owner):
    with pytest.raises(ValueError):
        fields.create_definition(
            group.id,
            schemas.FieldDefinitionCreateRequest(name="Stage", type=FieldType.DROPDOWN),
            owner.id,
        )


def test_inactive_definitions_are_hidden_and_rejected(fields, group, owner, task):
    definition = fields.create_definition(
        group.id, schemas.FieldDefinitionCreateRequest(name="Legacy", type=FieldType.TEXT), owner.id
    )
    fields.update_definition(
        definition.id, schemas.FieldDefinitionUpdateRequest(is_active=False), owner.id
    )

    assert fields.list_definitions(group.id, owner.id) == []
    assert len(fields.list_definitions(group.id, owner.id, include_inactive=True)) == 1
    with pytest.raises(NotFoundError):
        fields.upsert_task_field(
            task.id,
            schemas.TaskFieldUpsertRequest(field_definition_id=definition.id, field_value="x"),
            owner.id,
        )


def test_upsert_by_definition_validates_and_updates_in_place(fields, group, owner, task):
    definition = fields.create_definition(
        group.id,
        schemas.FieldDefinitionCreateRequest(
            name="Stage", type=FieldType.DROPDOWN, options=["plan", "build"]
        ),
        owner.id,
    )
    request = schemas.TaskFieldUpsertRequest(field_definition_id=definition.id, field_value="plan")

    created = fields.upsert_task_field(task.id, request, owner.id)
    with pytest.raises(ValueError):
        fields.upsert_task_field(
            task.id,
            schemas.TaskFieldUpsertRequest(field_definition_id=definition.id, field_value="ship"),
            owner.id,
        )
    updated = fields.upsert_task_field(
        task.id,
        schemas.TaskFieldUpsertRequest(field_definition_id=definition.id, field_value="build"),
        owner.id,
    )

    assert updated.id == created.id
    assert updated.field_value == "build"
    assert updated.is_group_field is True
    assert updated.field_name == "Stage"


def test_renaming_definition_syncs_task_values(fields, group, owner, task):
    definition = fields.create_definition(
        group.id, schemas.FieldDefinitionCreateRequest(name="Cost", type=FieldType.NUMBER), owner.id
    )
    fields.upsert_task_field(
        task.id,
        schemas.TaskFieldUpsertRequest(field_definition_id=definition.id, field_value="10"),
        owner.id,
    )

    fields.update_definition(
        definition.id, schemas.FieldDefinitionUpdateRequest(name="Budget"), owner.id
    )

    assert [f.field_name for f in fields.list_task_fields(task.id, owner.id)] == ["Budget"]


def test_ad_hoc_fields_and_reorder(fields, owner, task):
    a = fields.upsert_task_field(
        task.id, schemas.TaskFieldUpsertRequest(field_name="Ticket", field_value="OPS-1"), owner.id
    )
    b = fields.upsert_task_field(
        task.id, schemas.TaskFieldUpsertRequest(field_name="Vendor", field_value="Acme"), owner.id
    )
    assert (a.display_order, b.display_order, a.is_group_field) == (0, 1, False)

    reordered = fields.reorder_task_fields(
        task.id,
        schemas.ReorderRequest(
            fields=[
                schemas.ReorderItem(id=a.id, display_order=1),
                schemas.ReorderItem(id=b.id, display_order=0),
            ]
        ),
        owner.id,
    )
    assert [f.field_name for f in reordered] == ["Vendor", "Ticket"]

    with pytest.raises(NotFoundError) as excinfo:
        fields.reorder_task_fields(
            task.id,
            schemas.ReorderRequest(fields=[schemas.ReorderItem(id=uuid.uuid4(), display_order=0)]),
            owner.id,
        )
    assert excinfo.value.details["ids"]


def test_upsert_without_name_or_definition_is_rejected(fields, owner, task):
    with pytest.raises(ValueError):
        fields.upsert_task_field(
            task.id, schemas.TaskFieldUpsertRequest(field_value="orphan"), owner.id
        )


def test_bulk_values_are_validated_against_definition_type(
    session, settings, fields, group, owner, task
):
    definition = fields.create_definition(
        group.id,
        schemas.FieldDefinitionCreateRequest(name="Estimate", type=FieldType.NUMBER),
        owner.id,
    )
    fields.upsert_task_field(
        task.id,
        schemas.TaskFieldUpsertRequest(field_definition_id=definition.id, field_value="3"),
        owner.id,
    )
    tasks = TaskService(session, settings)

    with pytest.raises(ValueError):
        tasks.set_custom_field_values(group.id, task.id, {"Estimate": "not-a-number"}, owner.id)
    session.rollback()

    tasks.set_custom_field_values(
        group.id, task.id, {"Estimate": " 5 ", "Vendor": "Acme"}, owner.id
    )
    stored = {
        f.field_name: (f.field_type, f.field_value)
        for f in fields.list_task_fields(task.id, owner.id)
    }
    assert stored == {
        "Estimate": (FieldType.NUMBER, "5"),
        "Vendor": (FieldType.TEXT, "Acme"),
    }
