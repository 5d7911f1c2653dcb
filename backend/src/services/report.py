from __future__ import annotations

from models import MeetingResult

KM_TO_MILES = 0.621371
REVIEW_PREVIEW_CHARS = 160


def _shorten(text: str) -> str:
    text = " ".join(text.split())
    if len(text) <= REVIEW_PREVIEW_CHARS:
        return text
    return text[: REVIEW_PREVIEW_CHARS - 3].rstrip() + "..."


def build_report(result: MeetingResult, *, top_n: int = 5) -> str:
    o1, o2, mid = result.origin1, result.origin2, result.midpoint
    midpoint_note = " (approximate: simple average)" if result.midpoint_fallback else ""
    header = [
        "## Meeting Spot Recommendations",
        "",
        f"- Person 1: {o1.lat:.5f}, {o1.lng:.5f}",
        f"- Person 2: {o2.lat:.5f}, {o2.lng:.5f}",
        f"- Midpoint: {mid.lat:.5f}, {mid.lng:.5f}{midpoint_note}",
    ]

    params = result.search_parameters
    if params is not None:
        header.append(f"- Searched: {', '.join(params.place_types)}")
        header.append(f"- Occasion: {params.occasion}")
        header.append(f"- Minimum rating: {params.min_rating:.1f}")
    header.append("")

    if result.insights:
        header.append("### Insights")
        header.extend(f"- {text}" for text in result.insights)
        header.append("")

    lines = header
    lines.append("### Top Picks")
    if not result.venues:
        lines.append("No places nearby were fair for both of you.")

    for idx, venue in enumerate(result.venues[:top_n], start=1):
        ds = venue.distance_score
        rating = f"{venue.rating:.1f}/5" if venue.rating is not None else "Not rated"
        lines += [
            f"#### {idx}. {venue.name}",
            f"- Address: {venue.address or 'Not provided'}",
            f"- Type: {venue.source_category}",
            f"- Rating: {rating} ({venue.user_ratings_count or 0} reviews)",
            f"- Score: {venue.ai_score:.0f}",
        ]
        if ds is not None:
            lines.append(
                f"- Distance: {ds.distance_from_origin1:.1f} km / {ds.distance_from_origin2:.1f} km "
                f"(~{ds.distance_from_origin1 * KM_TO_MILES:.1f} / {ds.distance_from_origin2 * KM_TO_MILES:.1f} miles)"
            )
        if venue.menu_url:
            lines.append(f"- Menu: {venue.menu_url}")
        if venue.reviews:
            review = venue.reviews[0]
            stars = f" ({review.rating:.0f}/5)" if review.rating is not None else ""
            lines.append(f"- Review by {review.author}{stars}: \"{_shorten(review.text)}\"")
        if venue.ai_reasons:
            lines.append("- Why:\n" + "\n".join(f"  * {text}" for text in venue.ai_reasons))
        lines.append("")

    return "\n".join(lines)
