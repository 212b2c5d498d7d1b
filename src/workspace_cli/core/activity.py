"""Drive Activity v2 queries and rendering.

API objects such as ``ActionDetail`` carry exactly one populated member out of
a fixed set. They are parsed into one dataclass per variant and rendered by
exhaustive ``match`` statements, so an unhandled variant is a type error
rather than a silently empty map.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, assert_never

from loguru import logger

from .errors import InvalidInputError

# Users


@dataclass(frozen=True)
class KnownUser:
    person_name: str = ""
    is_current_user: bool = False


@dataclass(frozen=True)
class DeletedUser:
    pass


@dataclass(frozen=True)
class UnknownUser:
    pass


User = KnownUser | DeletedUser | UnknownUser


def parse_user(data: dict[str, Any]) -> User:
    if "knownUser" in data:
        known = data["knownUser"] or {}
        return KnownUser(person_name=known.get("personName", ""), is_current_user=bool(known.get("isCurrentUser")))
    if "deletedUser" in data:
        return DeletedUser()
    return UnknownUser()


def render_user(user: User) -> dict[str, Any]:
    match user:
        case KnownUser(person_name=name, is_current_user=current):
            result: dict[str, Any] = {"type": "known_user"}
            if name:
                result["person_name"] = name
            if current:
                result["is_current_user"] = True
            return result
        case DeletedUser():
            return {"type": "deleted_user"}
        case UnknownUser():
            return {"type": "unknown_user"}
        case _:
            assert_never(user)


# Action details


@dataclass(frozen=True)
class Create:
    method: str = ""  # new, upload or copy


@dataclass(frozen=True)
class Edit:
    pass


@dataclass(frozen=True)
class Move:
    added_parents: list[str] = field(default_factory=list)
    removed_parents: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Rename:
    old_title: str = ""
    new_title: str = ""


@dataclass(frozen=True)
class Delete:
    delete_type: str = ""


@dataclass(frozen=True)
class Restore:
    restore_type: str = ""


@dataclass(frozen=True)
class Comment:
    subtype: str = ""  # post, assignment or suggestion
    detail_subtype: str = ""
    assigned_user: User | None = None
    mentioned_users: list[User] = field(default_factory=list)


@dataclass(frozen=True)
class Permission:
    role: str = ""
    user: User | None = None
    group: str = ""
    domain: str = ""
    anyone: bool = False


@dataclass(frozen=True)
class PermissionChange:
    added: list[Permission] = field(default_factory=list)
    removed: list[Permission] = field(default_factory=list)


@dataclass(frozen=True)
class SettingsChange:
    restriction_changes: list[dict[str, str]] = field(default_factory=list)


@dataclass(frozen=True)
class DlpChange:
    dlp_type: str = ""


@dataclass(frozen=True)
class Reference:
    reference_type: str = ""


@dataclass(frozen=True)
class LabelChange:
    changes: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class UnknownAction:
    pass


ActionDetail = (
    Create
    | Edit
    | Move
    | Rename
    | Delete
    | Restore
    | Comment
    | PermissionChange
    | SettingsChange
    | DlpChange
    | Reference
    | LabelChange
    | UnknownAction
)


def _parent_titles(parents: list[dict[str, Any]]) -> list[str]:
    titles = []
    for parent in parents:
        if "driveItem" in parent:
            titles.append(parent["driveItem"].get("title", ""))
        elif "drive" in parent:
            titles.append(parent["drive"].get("title", ""))
    return titles


def _parse_permission(data: dict[str, Any]) -> Permission:
    return Permission(
        role=data.get("role", ""),
        user=parse_user(data["user"]) if "user" in data else None,
        group=(data.get("group") or {}).get("email", ""),
        domain=(data.get("domain") or {}).get("name", ""),
        anyone="anyone" in data,
    )


def _parse_comment(data: dict[str, Any]) -> Comment:
    mentioned = [parse_user(u) for u in data.get("mentionedUsers", [])]
    if "post" in data:
        return Comment("post", data["post"].get("subtype", ""), mentioned_users=mentioned)
    if "assignment" in data:
        assignment = data["assignment"]
        assigned = parse_user(assignment["assignedUser"]) if "assignedUser" in assignment else None
        return Comment("assignment", assignment.get("subtype", ""), assigned, mentioned)
    if "suggestion" in data:
        return Comment("suggestion", data["suggestion"].get("subtype", ""), mentioned_users=mentioned)
    return Comment(mentioned_users=mentioned)


def parse_action_detail(data: dict[str, Any]) -> ActionDetail:
    """Pick the populated variant of an API ``ActionDetail``."""
    if "create" in data:
        create = data["create"] or {}
        method = next((m for m in ("copy", "upload", "new") if m in create), "")
        return Create(method=method)
    if "edit" in data:
        return Edit()
    if "move" in data:
        move = data["move"] or {}
        return Move(
            added_parents=_parent_titles(move.get("addedParents", [])),
            removed_parents=_parent_titles(move.get("removedParents", [])),
        )
    if "rename" in data:
        rename = data["rename"] or {}
        return Rename(old_title=rename.get("oldTitle", ""), new_title=rename.get("newTitle", ""))
    if "delete" in data:
        return Delete(delete_type=(data["delete"] or {}).get("type", ""))
    if "restore" in data:
        return Restore(restore_type=(data["restore"] or {}).get("type", ""))
    if "comment" in data:
        return _parse_comment(data["comment"] or {})
    if "permissionChange" in data:
        change = data["permissionChange"] or {}
        return PermissionChange(
            added=[_parse_permission(p) for p in change.get("addedPermissions", [])],
            removed=[_parse_permission(p) for p in change.get("removedPermissions", [])],
        )
    if "settingsChange" in data:
        changes = (data["settingsChange"] or {}).get("restrictionChanges", [])
        return SettingsChange(
            restriction_changes=[
                {"feature": c.get("feature", ""), "new_restriction": c.get("newRestriction", "")} for c in changes
            ]
        )
    if "dlpChange" in data:
        return DlpChange(dlp_type=(data["dlpChange"] or {}).get("type", ""))
    if "reference" in data:
        return Reference(reference_type=(data["reference"] or {}).get("type", ""))
    if "appliedLabelChange" in data:
        changes = []
        for c in (data["appliedLabelChange"] or {}).get("changes", []):
            change = {key: c[key] for key in ("label", "title", "types") if c.get(key)}
            changes.append(change)
        return LabelChange(changes=changes)
    return UnknownAction()


def _render_permission(permission: Permission) -> dict[str, Any]:
    result: dict[str, Any] = {}
    if permission.role:
        result["role"] = permission.role
    if permission.user is not None:
        result["user"] = render_user(permission.user)
    if permission.group:
        result["group"] = permission.group
    if permission.domain:
        result["domain"] = permission.domain
    if permission.anyone:
        result["anyone"] = True
    return result


def render_action_detail(detail: ActionDetail) -> dict[str, Any]:
    match detail:
        case Create(method=method):
            return {"type": "create", "create": {"method": method} if method else {}}
        case Edit():
            return {"type": "edit"}
        case Move(added_parents=added, removed_parents=removed):
            move: dict[str, Any] = {}
            if added:
                move["added_parents"] = added
            if removed:
                move["removed_parents"] = removed
            return {"type": "move", "move": move}
        case Rename(old_title=old, new_title=new):
            return {"type": "rename", "rename": {"old_title": old, "new_title": new}}
        case Delete(delete_type=kind):
            return {"type": "delete", "delete": {"delete_type": kind}}
        case Restore(restore_type=kind):
            return {"type": "restore", "restore": {"restore_type": kind}}
        case Comment():
            comment: dict[str, Any] = {}
            if detail.subtype:
                comment["subtype"] = detail.subtype
                if detail.detail_subtype:
                    comment[f"{detail.subtype}_subtype"] = detail.detail_subtype
            if detail.assigned_user is not None:
                comment["assigned_user"] = render_user(detail.assigned_user)
            if detail.mentioned_users:
                comment["mentioned_users"] = [render_user(u) for u in detail.mentioned_users]
            return {"type": "comment", "comment": comment}
        case PermissionChange(added=added, removed=removed):
            change: dict[str, Any] = {}
            if added:
                change["added"] = [_render_permission(p) for p in added]
            if removed:
                change["removed"] = [_render_permission(p) for p in removed]
            return {"type": "permission_change", "permission_change": change}
        case SettingsChange(restriction_changes=changes):
            return {"type": "settings_change", "settings_change": {"restriction_changes": changes} if changes else {}}
        case DlpChange(dlp_type=kind):
            return {"type": "dlp_change", "dlp_change": {"dlp_type": kind}}
        case Reference(reference_type=kind):
            return {"type": "reference", "reference": {"reference_type": kind}}
        case LabelChange(changes=changes):
            return {"type": "label_change", "label_change": {"changes": changes} if changes else {}}
        case UnknownAction():
            return {}
        case _:
            assert_never(detail)


# Actors


@dataclass(frozen=True)
class UserActor:
    user: User


@dataclass(frozen=True)
class AdministratorActor:
    pass


@dataclass(frozen=True)
class AnonymousActor:
    pass


@dataclass(frozen=True)
class SystemActor:
    system_type: str = ""


@dataclass(frozen=True)
class ImpersonationActor:
    impersonated_user: User | None = None


@dataclass(frozen=True)
class UnknownActor:
    pass


Actor = UserActor | AdministratorActor | AnonymousActor | SystemActor | ImpersonationActor | UnknownActor


def parse_actor(data: dict[str, Any]) -> Actor:
    if "user" in data:
        return UserActor(parse_user(data["user"] or {}))
    if "administrator" in data:
        return AdministratorActor()
    if "anonymous" in data:
        return AnonymousActor()
    if "system" in data:
        return SystemActor((data["system"] or {}).get("type", ""))
    if "impersonation" in data:
        impersonated = (data["impersonation"] or {}).get("impersonatedUser")
        return ImpersonationActor(parse_user(impersonated) if impersonated else None)
    return UnknownActor()


def render_actor(actor: Actor) -> dict[str, Any]:
    match actor:
        case UserActor(user=user):
            return {"type": "user", "user": render_user(user)}
        case AdministratorActor():
            return {"type": "administrator"}
        case AnonymousActor():
            return {"type": "anonymous"}
        case SystemActor(system_type=kind):
            return {"type": "system", "system_type": kind} if kind else {"type": "system"}
        case ImpersonationActor(impersonated_user=user):
            result: dict[str, Any] = {"type": "impersonation"}
            if user is not None:
                result["impersonated_user"] = render_user(user)
            return result
        case UnknownActor():
            return {}
        case _:
            assert_never(actor)


# Targets


@dataclass(frozen=True)
class DriveItemTarget:
    name: str = ""
    title: str = ""
    mime_type: str = ""
    item_type: str = ""  # file or folder
    folder_type: str = ""
    owner: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SharedDriveTarget:
    name: str = ""
    title: str = ""


@dataclass(frozen=True)
class FileCommentTarget:
    comment_id: str = ""
    link: str = ""
    parent: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class UnknownTarget:
    pass


Target = DriveItemTarget | SharedDriveTarget | FileCommentTarget | UnknownTarget


def _parse_owner(data: dict[str, Any]) -> dict[str, Any]:
    owner: dict[str, Any] = {}
    if "user" in data:
        owner["user"] = render_user(parse_user(data["user"] or {}))
    if "drive" in data:
        drive = data["drive"] or {}
        owner["drive"] = {"name": drive.get("name", ""), "title": drive.get("title", "")}
    domain = (data.get("domain") or {}).get("name", "")
    if domain:
        owner["domain"] = domain
    return owner


def parse_target(data: dict[str, Any]) -> Target:
    if "driveItem" in data:
        item = data["driveItem"] or {}
        item_type = ""
        folder_type = ""
        if "driveFolder" in item:
            item_type = "folder"
            folder_type = (item["driveFolder"] or {}).get("type", "")
        elif "driveFile" in item:
            item_type = "file"
        return DriveItemTarget(
            name=item.get("name", ""),
            title=item.get("title", ""),
            mime_type=item.get("mimeType", ""),
            item_type=item_type,
            folder_type=folder_type,
            owner=_parse_owner(item["owner"]) if item.get("owner") else {},
        )
    if "drive" in data:
        drive = data["drive"] or {}
        return SharedDriveTarget(name=drive.get("name", ""), title=drive.get("title", ""))
    if "fileComment" in data:
        comment = data["fileComment"] or {}
        parent = comment.get("parent") or {}
        return FileCommentTarget(
            comment_id=comment.get("legacyCommentId", ""),
            link=comment.get("linkToDiscussion", ""),
            parent={key: parent[key] for key in ("name", "title") if parent.get(key)},
        )
    return UnknownTarget()


def _non_empty(**values: Any) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value}


def render_target(target: Target) -> dict[str, Any]:
    match target:
        case DriveItemTarget():
            item = _non_empty(
                name=target.name,
                title=target.title,
                mime_type=target.mime_type,
                owner=target.owner,
                item_type=target.item_type,
                folder_type=target.folder_type,
            )
            return {"type": "drive_item", "drive_item": item}
        case SharedDriveTarget(name=name, title=title):
            return {"type": "shared_drive", "shared_drive": _non_empty(name=name, title=title)}
        case FileCommentTarget(comment_id=comment_id, link=link, parent=parent):
            return {"type": "file_comment", "file_comment": _non_empty(comment_id=comment_id, link=link, parent=parent)}
        case UnknownTarget():
            return {}
        case _:
            assert_never(target)


# Activities


def _render_time_range(data: dict[str, Any]) -> dict[str, str]:
    return _non_empty(start=data.get("startTime", ""), end=data.get("endTime", ""))


def render_activity(data: dict[str, Any]) -> dict[str, Any]:
    """Simplified view of one ``DriveActivity``."""
    activity: dict[str, Any] = {}
    if data.get("timestamp"):
        activity["timestamp"] = data["timestamp"]
    if data.get("timeRange"):
        activity["time_range"] = _render_time_range(data["timeRange"])
    if data.get("primaryActionDetail"):
        activity["primary_action"] = render_action_detail(parse_action_detail(data["primaryActionDetail"]))

    # Individual actions only add information for consolidated activities
    actions = data.get("actions", [])
    if len(actions) > 1:
        rendered = []
        for action in actions:
            act: dict[str, Any] = {}
            if action.get("detail"):
                act["detail"] = render_action_detail(parse_action_detail(action["detail"]))
            if action.get("timestamp"):
                act["timestamp"] = action["timestamp"]
            if action.get("timeRange"):
                act["time_range"] = _render_time_range(action["timeRange"])
            if action.get("actor"):
                act["actor"] = render_actor(parse_actor(action["actor"]))
            if action.get("target"):
                act["target"] = render_target(parse_target(action["target"]))
            rendered.append(act)
        activity["actions"] = rendered

    if data.get("actors"):
        activity["actors"] = [render_actor(parse_actor(a)) for a in data["actors"]]
    if data.get("targets"):
        activity["targets"] = [render_target(parse_target(t)) for t in data["targets"]]
    return activity


def build_activity_query(
    item_id: str | None = None,
    folder_id: str | None = None,
    api_filter: str | None = None,
    days: int = 0,
    page_size: int = 50,
    page_token: str | None = None,
    consolidate: bool = True,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Build a ``QueryDriveActivityRequest`` body."""
    if item_id and folder_id:
        raise InvalidInputError("--item-id and --folder-id are mutually exclusive")
    if days < 0:
        raise InvalidInputError("--days must be a positive number")

    body: dict[str, Any] = {"pageSize": page_size}
    if item_id:
        body["itemName"] = f"items/{item_id}"
    if folder_id:
        body["ancestorName"] = f"items/{folder_id}"

    filters = []
    if days > 0:
        cutoff = (now or datetime.now(UTC)) - timedelta(days=days)
        filters.append(f'time >= "{cutoff.strftime("%Y-%m-%dT%H:%M:%SZ")}"')
    if api_filter:
        filters.append(api_filter)
    if filters:
        body["filter"] = " AND ".join(filters)

    if page_token:
        body["pageToken"] = page_token
    if not consolidate:
        body["consolidationStrategy"] = {"none": {}}
    return body


def query_activity(service: Any, body: dict[str, Any]) -> dict[str, Any]:
    """Run a Drive Activity query and render its activities."""
    logger.debug(f"Querying drive activity: {body}")
    response = service.activity().query(body=body).execute()
    activities = [render_activity(a) for a in response.get("activities", [])]
    result: dict[str, Any] = {"activities": activities, "count": len(activities)}
    if response.get("nextPageToken"):
        result["next_page_token"] = response["nextPageToken"]
    return result
