"""
Spreadsheet-friendly CSV renderings of the admin listings and the dashboard.

Files start with a UTF-8 byte order mark so Excel picks the right encoding,
rows end with ``\\n`` and cells are quoted only when they contain a quote,
a comma or a line break.
"""
import csv
import io
import math
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from kalikascan_admin.core.records.normalizers import as_num, get_path, safe_int

BOM = "\ufeff"
TAXONOMY_RANKS = ("kingdom", "phylum", "class", "order", "family", "genus")
CLASS_KEYS = ("class", "className", "class_name", "class-name", "_class", "clazz")
MAX_TAXONOMY_DEPTH = 10

PLANT_SCAN_HEADERS = [
    "Scanned By", "User Email", "Scientific Name", "Confidence (%)", "Scanned Date", "Address",
    "Coordinate - Latitude", "Coordinate - Longitude",
    "Taxonomy - Kingdom", "Taxonomy - Phylum", "Taxonomy - Class",
    "Taxonomy - Order", "Taxonomy - Family", "Taxonomy - Genus",
    "Common Names", "Image URLs",
]

MAP_POST_HEADERS = [
    "User Name", "User Email", "Verify Status", "Expert (Verified/Invalidated By)", "Posted Date",
    "Address", "Scientific Name",
    "Taxonomy - Kingdom", "Taxonomy - Phylum", "Taxonomy - Class",
    "Taxonomy - Order", "Taxonomy - Family", "Taxonomy - Genus",
    "Coordinate - Latitude", "Coordinate - Longitude", "Caption", "Likes Count", "Comments Count",
]

HEALTH_ASSESSMENT_HEADERS = [
    "Assessed By", "User Email", "Created Day", "Is Healthy", "Confidence (%)",
    "Is Plant Probability (%)", "Is Healthy Probability (%)", "Top Disease",
    "Top Disease Probability (%)", "Address", "Coordinate - Latitude", "Coordinate - Longitude",
    "Image URLs", "Disease Suggestions (names)",
]


def cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def render_csv(rows: Iterable[Sequence[Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    for row in rows:
        writer.writerow([cell(v) for v in row])
    return BOM + buffer.getvalue().rstrip("\n")


def export_filename(prefix: str, today: date) -> str:
    return f"{prefix}_{today.isoformat()}.csv"


def join_list(values: Any, separator: str = ", ") -> str:
    """Non-blank strings of a list, joined."""
    if not isinstance(values, list):
        return ""
    return separator.join(v for v in values if isinstance(v, str) and v.strip())


def percent(value: Any) -> str:
    number = as_num(value)
    return "" if number is None else str(int(math.floor(number * 100 + 0.5)))


def user_name(user: Optional[Dict[str, Any]], fallback: Any = "Unknown") -> str:
    user = user or {}
    return user.get("displayName") or user.get("username") or user.get("email") or fallback


# Plant scans

def plant_scan_row(scan: Dict[str, Any]) -> List[Any]:
    user = scan.get("user") or {}
    top = scan.get("topSuggestion") if isinstance(scan.get("topSuggestion"), dict) else {}
    taxonomy = top.get("taxonomy") if isinstance(top.get("taxonomy"), dict) else {}
    image_urls = scan.get("imageUrls") if isinstance(scan.get("imageUrls"), list) else scan.get("images")

    return [
        user_name(user),
        user.get("email") or "",
        top.get("name") or scan.get("plantName") or "",
        percent(scan.get("confidence")),
        scan.get("createdDay"),
        scan.get("addressText"),
        scan.get("latitude"),
        scan.get("longitude"),
        *(taxonomy.get(rank) for rank in TAXONOMY_RANKS),
        join_list(top.get("common_names")),
        " | ".join(image_urls) if isinstance(image_urls, list) else "",
    ]


def plant_scans_csv(scans: Iterable[Dict[str, Any]]) -> str:
    return render_csv([PLANT_SCAN_HEADERS, *(plant_scan_row(s) for s in scans)])


# Map posts

def _list_field(post: Dict[str, Any], field: str) -> list:
    value = post.get(field)
    return value if isinstance(value, list) else []


def derive_verify_status(post: Dict[str, Any]) -> str:
    """Removal beats expert invalidation, which beats validation."""
    if post.get("removed") is True:
        return "Invalid"
    if _list_field(post, "invalidatedByExpert"):
        return "Invalidated by Expert"
    if _list_field(post, "expertValidatedBy"):
        return "Verified"
    return "Unverified"


def expert_label(expert: Any) -> str:
    if not expert:
        return ""
    if isinstance(expert, str):
        return expert
    if not isinstance(expert, dict):
        return cell(expert)

    name = ""
    for key in ("displayName", "username", "email", "name", "uid", "id"):
        if expert.get(key):
            name = cell(expert[key])
            break
    email = f" ({expert['email']})" if expert.get("email") else ""
    return f"{name}{email}".strip()


def _taxon_name(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (str, int, float, bool)):
        return cell(value)
    if isinstance(value, dict):
        for key in ("name", "value", "scientificName", "scientific_name", "label"):
            if value.get(key) is not None:
                return cell(value[key])
    return ""


def _rank_of(item: Any) -> str:
    if not isinstance(item, dict):
        return ""
    return str(item.get("rank") or item.get("type") or item.get("level") or "").lower().strip()


def normalize_taxonomy(node: Any) -> Dict[str, str]:
    """
    Flatten a taxonomy given either as a rank map or as a list of
    ``{"rank": ..., "name": ...}`` entries.
    """
    flat: Dict[str, str] = {}
    if not node:
        return flat

    if isinstance(node, list):
        for item in node:
            rank = _rank_of(item)
            if rank not in TAXONOMY_RANKS:
                continue
            raw = None
            for key in ("name", "value", "taxon"):
                if item.get(key) is not None:
                    raw = item[key]
                    break
            name = _taxon_name(raw if raw is not None else item)
            if name:
                flat[rank] = name
        return flat

    for rank in TAXONOMY_RANKS:
        if rank == "class":
            raw = next((node[k] for k in CLASS_KEYS if node.get(k) is not None), None)
        else:
            raw = next((node[k] for k in (rank, rank.capitalize(), rank.upper()) if node.get(k) is not None), None)
        flat[rank] = _taxon_name(raw)
    return flat


def _taxonomy_score(node: Any) -> int:
    """How many taxonomy ranks a candidate node mentions."""
    if isinstance(node, list):
        return sum(1 for item in node if _rank_of(item) in TAXONOMY_RANKS)
    if not isinstance(node, dict):
        return 0

    keys = {str(k).lower() for k in node.keys()}
    return sum(
        1 for rank in TAXONOMY_RANKS
        if {rank, f"{rank}name", f"{rank}_name", f"{rank}-name"} & keys
    )


def find_taxonomy(root: Any) -> Dict[str, str]:
    """
    Search a whole post for the node that looks most like a taxonomy.

    Map posts were written by several app versions, so the taxonomy can sit
    under ``plant``, ``topSuggestion`` or deeper.
    """
    seen = set()
    best = None
    best_score = 0

    def walk(node: Any, depth: int) -> None:
        nonlocal best, best_score
        if not isinstance(node, (dict, list)) or depth > MAX_TAXONOMY_DEPTH or id(node) in seen:
            return
        seen.add(id(node))

        score = _taxonomy_score(node)
        if score > best_score:
            best, best_score = node, score

        children = node if isinstance(node, list) else node.values()
        for child in children:
            walk(child, depth + 1)

    walk(root, 0)
    return normalize_taxonomy(best)


def map_post_row(post: Dict[str, Any]) -> List[Any]:
    user = post.get("user") or post.get("userSnapshot") or {}
    status = derive_verify_status(post)

    expert = ""
    if status == "Invalidated by Expert":
        expert = expert_label(_list_field(post, "invalidatedByExpert")[-1])
    elif status == "Verified":
        expert = expert_label(_list_field(post, "expertValidatedBy")[-1])

    address = (
        post.get("detailedAddress")
        or post.get("addressText")
        or post.get("readableLocation")
        or get_path(post, "location.readableLocation")
        or ""
    )

    plant = post.get("plant") if isinstance(post.get("plant"), dict) else {}
    top = post.get("topSuggestion") or plant.get("topSuggestion") or {}
    scientific_name = plant.get("scientificName") or get_path(top, "name") or post.get("plantName") or ""

    taxonomy = find_taxonomy(post)
    lat = get_path(post, "location.latitude")
    lon = get_path(post, "location.longitude")
    comments = as_num(post.get("commentsCount"))

    return [
        user.get("displayName") or user.get("username") or post.get("uid") or "Unknown",
        user.get("email") or "",
        status,
        expert,
        post.get("createdDay"),
        address,
        scientific_name,
        *(taxonomy.get(rank) for rank in TAXONOMY_RANKS),
        lat if lat is not None else post.get("latitude"),
        lon if lon is not None else post.get("longitude"),
        post.get("caption"),
        len(_list_field(post, "likes")),
        comments if comments is not None else 0,
    ]


def map_posts_csv(posts: Iterable[Dict[str, Any]]) -> str:
    return render_csv([MAP_POST_HEADERS, *(map_post_row(p) for p in posts)])


# Health assessments

def health_assessment_row(item: Dict[str, Any]) -> List[Any]:
    user = item.get("user") or {}
    top = item.get("topDisease") if isinstance(item.get("topDisease"), dict) else {}
    healthy = item.get("isHealthyBinary")

    suggestions = item.get("diseaseSuggestions") if isinstance(item.get("diseaseSuggestions"), list) else []
    suggestion_names = [
        get_path(s, "details.local_name") or get_path(s, "name")
        for s in suggestions if isinstance(s, dict)
    ]
    image_urls = item.get("imageUrls") if isinstance(item.get("imageUrls"), list) else []

    return [
        user_name(user),
        user.get("email") or "",
        item.get("createdDay"),
        "" if healthy is None else ("Yes" if healthy else "No"),
        percent(item.get("confidence")),
        percent(item.get("isPlantProbability")),
        percent(item.get("isHealthyProbability")),
        item.get("diseaseName") or get_path(top, "details.local_name") or top.get("name") or "",
        percent(top.get("probability")),
        item.get("addressText"),
        get_path(item, "location.latitude"),
        get_path(item, "location.longitude"),
        " | ".join(image_urls),
        join_list([n for n in suggestion_names if n]),
    ]


def health_assessments_csv(items: Iterable[Dict[str, Any]]) -> str:
    return render_csv([HEALTH_ASSESSMENT_HEADERS, *(health_assessment_row(i) for i in items)])


# Dashboard

def dashboard_csv(global_data: Optional[Dict[str, Any]], daily: List[Dict[str, Any]],
                  users: List[Dict[str, Any]], diseases: List[Dict[str, Any]]) -> str:
    """
    One file with four sections separated by blank lines.

    Args:
        global_data: analytics/global document (may be None)
        daily: Daily buckets with id, plantScans, mapPosts, healthAssessments
        users: Rows with fullName, email, lastActiveLabel, hoursAgo
        diseases: Rows of the disease time series
    """
    g = global_data or {}
    plant_id_requests = g.get("totalPlantIdRequests")
    if plant_id_requests is None:
        plant_id_requests = safe_int(g.get("totalPlantScans")) + safe_int(g.get("totalHealthAssessments"))

    rows: List[List[Any]] = [
        ["GLOBAL SUMMARY"],
        ["Metric", "Value"],
        ["Total Plant Scans", safe_int(g.get("totalPlantScans"))],
        ["Plant Scan Success", safe_int(g.get("totalPlantScanSuccess"))],
        ["Plant Scan Fail", safe_int(g.get("totalPlantScanFail"))],
        ["Total Map Posts", safe_int(g.get("totalMapPosts"))],
        ["Total Health Assessments", safe_int(g.get("totalHealthAssessments"))],
        ["Health Success", safe_int(g.get("totalHealthSuccess"))],
        ["Health Fail", safe_int(g.get("totalHealthFail"))],
        ["Total Plant.id Requests", safe_int(plant_id_requests)],
        [],
        [f"DAILY ACTIVITY (Last {len(daily)} Days)"],
        ["Date", "Plant Scans", "Map Posts", "Health Assessments", "Plant.id Requests"],
    ]

    sum_plant = sum_map = sum_health = 0
    for day in daily:
        plant = safe_int(day.get("plantScans"))
        posts = safe_int(day.get("mapPosts"))
        health = safe_int(day.get("healthAssessments"))
        sum_plant += plant
        sum_map += posts
        sum_health += health
        rows.append([day.get("id") or day.get("date"), plant, posts, health, plant + health])
    rows.append(["TOTAL", sum_plant, sum_map, sum_health, sum_plant + sum_health])

    rows.extend([[], ["USERS LAST ACTIVE"], ["Name", "Email", "Last Active", "Hours Ago"]])
    total_hours = 0
    for user in users:
        hours = safe_int(user.get("hoursAgo"))
        total_hours += hours
        rows.append([user.get("fullName"), user.get("email") or "", user.get("lastActiveLabel"), hours])
    average = round(total_hours / len(users), 1) if users else 0
    rows.append(["TOTAL USERS", len(users), "AVG HOURS AGO", average])

    rows.extend([[], ["DISEASE DETECTIONS OVER TIME"],
                 ["Date", "Total Disease Count", "Top Disease", "Top Disease Count"]])
    total_diseases = 0
    overall: Dict[str, int] = {}
    for entry in diseases:
        total = safe_int(entry.get("totalDiseaseCount"))
        top_name = entry.get("topDisease") or ""
        top_count = safe_int(entry.get("topDiseaseCount"))
        total_diseases += total
        if top_name:
            overall[top_name] = overall.get(top_name, 0) + top_count
        rows.append([entry.get("date"), total, top_name, top_count])

    top_disease, top_count = "", 0
    for name, count in overall.items():
        if count > top_count:
            top_disease, top_count = name, count
    rows.append(["TOTAL", total_diseases, f"OVERALL TOP: {top_disease}" if top_disease else "", top_count])

    return render_csv(rows)
