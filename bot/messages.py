"""HTML texts shown in the group and in private chats."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence
from zoneinfo import ZoneInfo

from aiogram.utils.text_decorations import html_decoration

from core.constants import GiveawayDefaults, GiveawayState
from database.models import Giveaway, Winner
from services.commitment import revealed_seed
from services.lottery import VERIFY_FORMULA

SEED_PLACEHOLDER = "Chưa công bố"

STATE_LABELS = {
    GiveawayState.OPEN: "⏳ Đang chạy",
    GiveawayState.ENDED_DRAWN: "✅ Đã quay",
    GiveawayState.ENDED_EMPTY: "✅ Đã kết thúc (không có người tham gia)",
    GiveawayState.CANCELED: "⛔ Đã hủy",
    GiveawayState.ANNOUNCED: "📣 Đã công bố kết quả",
}


def esc(value: object) -> str:
    return html_decoration.quote(str(value if value is not None else ""))


def format_time(unix_ts: int, tz: str) -> str:
    return datetime.fromtimestamp(unix_ts, ZoneInfo(tz)).strftime(GiveawayDefaults.TIME_FORMAT)


def giveaway_post(
    prize: str,
    sponsor: str,
    winners: int,
    end_time: int,
    seed_hash: str,
    participant_count: int,
    tz: str,
) -> str:
    return (
        "🎉 <b>GIVEAWAY</b> 🎉\n\n"
        f"📌 <b>Nội dung:</b> {esc(prize)}\n"
        f"🤝 <b>Nhà tài trợ:</b> {esc(sponsor)}\n"
        f"⏰ <b>Thời gian quay:</b> {format_time(end_time, tz)}\n"
        f"🏆 <b>Số người trúng:</b> {winners}\n"
        f"👥 <b>Số người tham gia:</b> {participant_count}\n"
        f"🔒 <b>Commit:</b> <code>{esc(seed_hash)}</code>\n\n"
        "👇 Nhấn nút bên dưới để tham gia!"
    )


def giveaway_post_for(giveaway: Giveaway, participant_count: int, tz: str) -> str:
    return giveaway_post(
        prize=giveaway.prize,
        sponsor=giveaway.sponsor,
        winners=giveaway.winners,
        end_time=giveaway.end_time,
        seed_hash=giveaway.seed_hash or "N/A",
        participant_count=participant_count,
        tz=tz,
    )


def _winner_lines(winners: Iterable[Winner]) -> str:
    return "".join(f"{w.position}. {esc(w.name)} ({w.user_id})\n" for w in winners)


def winners_announcement(giveaway: Giveaway, winners: Sequence[Winner]) -> str:
    return (
        "🎉 <b>CHÚC MỪNG NGƯỜI CHIẾN THẮNG!</b> 🎉\n\n"
        f"#{giveaway.id}\n"
        "🏆 <b>Danh sách:</b>\n"
        f"{_winner_lines(winners)}\n"
        f"🎁 <b>Phần thưởng:</b> {esc(giveaway.prize)}\n"
        f"🤝 <b>Nhà tài trợ:</b> {esc(giveaway.sponsor)}\n\n"
        "📩 Vui lòng liên hệ nhà tài trợ để nhận quà."
    )


def empty_announcement(giveaway: Giveaway) -> str:
    return (
        f"⛔ Giveaway #{giveaway.id} kết thúc nhưng không có ai tham gia.\n"
        f"🎁 <b>Phần thưởng:</b> {esc(giveaway.prize)}\n"
        f"🤝 <b>Nhà tài trợ:</b> {esc(giveaway.sponsor)}\n"
    )


def canceled_post(giveaway: Giveaway, participant_count: int) -> str:
    return (
        "⛔ <b>GIVEAWAY ĐÃ BỊ HỦY</b>\n\n"
        f"📌 <b>Nội dung:</b> {esc(giveaway.prize)}\n"
        f"🤝 <b>Nhà tài trợ:</b> {esc(giveaway.sponsor)}\n"
        f"👥 <b>Đã tham gia:</b> {participant_count}\n"
        f"📝 <b>Lý do:</b> {esc(giveaway.cancel_reason or 'Không có')}\n"
    )


def canceled_notice(giveaway: Giveaway) -> str:
    return (
        f"⛔ Giveaway #{giveaway.id} đã bị <b>hủy</b>.\n"
        f"🎁 <b>Phần thưởng:</b> {esc(giveaway.prize)}\n"
        f"📝 <b>Lý do:</b> {esc(giveaway.cancel_reason or 'Không có')}"
    )


def proof(giveaway: Giveaway, tz: str, verified: Optional[bool] = None) -> str:
    """Operator-only proof. The seed is replaced by a placeholder until it may be revealed.

    ``verified`` is the result of recomputing the draw from the stored
    entrants; None when it was not checked.
    """
    seed = revealed_seed(giveaway)
    text = (
        "🔒 <b>PROOF (chỉ DM)</b>\n\n"
        f"#{giveaway.id}\n"
        f"🎁 <b>Phần thưởng:</b> {esc(giveaway.prize)}\n"
        f"🤝 <b>Nhà tài trợ:</b> {esc(giveaway.sponsor)}\n"
        f"⏰ <b>Quay lúc:</b> {format_time(giveaway.end_time, tz)}\n\n"
        f"🔒 <b>Commit:</b> <code>{esc(giveaway.seed_hash or 'N/A')}</code>\n"
        f"🔓 <b>Seed:</b> <code>{esc(seed or SEED_PLACEHOLDER)}</code>\n\n"
        "✅ <b>Verify:</b>\n"
        f"{esc(VERIFY_FORMULA)}\n"
        "commit = SHA256(seed)"
    )
    if verified is not None:
        result = "✅ khớp danh sách trúng giải đã lưu" if verified else "❌ KHÔNG khớp danh sách trúng giải đã lưu"
        text += f"\n\n🧮 <b>Tính lại:</b> {result}"
    return text


def status_label(giveaway: Giveaway) -> str:
    if giveaway.canceled:
        return "⛔ Đã hủy"
    if giveaway.ended:
        return "✅ Đã quay"
    return "⏳ Đang chạy"


def history(giveaways: Sequence[Giveaway], tz: str) -> str:
    text = "📜 <b>LỊCH SỬ GIVEAWAY</b>\n\n"
    if not giveaways:
        return text + "(chưa có)\n"
    for g in giveaways:
        announced = "📣" if g.announced else "🕒"
        text += (
            f"#{g.id} | {status_label(g)} {announced} | {esc(g.prize)}\n"
            f"   ⏰ {format_time(g.end_time, tz)}\n"
        )
    return text


def giveaway_info(
    giveaway: Giveaway,
    participant_count: int,
    winners: Sequence[Winner],
    tz: str,
    include_proof: bool,
    state: Optional[GiveawayState] = None,
    verified: Optional[bool] = None,
) -> str:
    label = STATE_LABELS[state] if state is not None else status_label(giveaway)
    text = (
        f"ℹ️ <b>Giveaway #{giveaway.id}</b>\n\n"
        f"🎁 <b>Phần thưởng:</b> {esc(giveaway.prize)}\n"
        f"🤝 <b>Nhà tài trợ:</b> {esc(giveaway.sponsor)}\n"
        f"🏆 <b>Số người trúng:</b> {giveaway.winners}\n"
        f"👥 <b>Tham gia:</b> {participant_count}\n"
        f"⏰ <b>Quay lúc:</b> {format_time(giveaway.end_time, tz)}\n"
        f"📌 <b>Trạng thái:</b> {label}\n"
    )
    if giveaway.ended and not giveaway.canceled:
        announced = "✅ Đã gửi kết quả" if giveaway.announced else "❌ Chưa gửi kết quả"
        text += f"📣 <b>Announce:</b> {announced}\n"
    if giveaway.canceled:
        text += f"📝 <b>Lý do hủy:</b> {esc(giveaway.cancel_reason or 'Không có')}\n"

    text += "\n🏆 <b>Winners:</b>\n"
    text += _winner_lines(winners) if winners else "(chưa có)\n"

    if include_proof:
        text += f"\n\n{proof(giveaway, tz, verified)}"
    else:
        text += (
            "\n\n🔒 Proof (Commit/Seed/Verify) chỉ xem trong DM: "
            f"dùng <code>/proof {giveaway.id}</code>"
        )
    return text


def form_preview(winners: int, end_time: int, prize: str, sponsor: str, tz: str) -> str:
    return (
        "🧾 <b>PREVIEW GIVEAWAY</b>\n\n"
        f"🏆 <b>Số người trúng:</b> {winners}\n"
        f"⏰ <b>Thời gian quay:</b> {format_time(end_time, tz)}\n"
        f"🎁 <b>Phần thưởng:</b> {esc(prize)}\n"
        f"🤝 <b>Nhà tài trợ:</b> {esc(sponsor)}\n\n"
        "Chọn ✅ để tạo và đăng vào group."
    )


def usage() -> str:
    return (
        "❌ Sai cú pháp\n"
        "Dùng:\n"
        f"/giveaway &lt;số_trúng&gt;|&lt;{GiveawayDefaults.TIME_FORMAT_HINT}&gt;|&lt;phần thưởng&gt;|&lt;nhà tài trợ&gt;\n\n"
        "Ví dụ:\n"
        "/giveaway 3|22:00 20/01/2026|ADMIN CHATGPT BUSINESS 1 THÁNG|@zaaraowo\n\n"
        "Hoặc dùng form:\n"
        "/newgiveaway"
    )


def help_text(is_admin: bool) -> str:
    text = (
        "📌 <b>BOT GIVEAWAY - HELP</b>\n\n"
        "👤 <b>User:</b>\n"
        "• <code>/start</code> - Bắt đầu\n"
        "• Tham gia giveaway: bấm nút 🎉 Tham gia trong group\n\n"
    )
    if not is_admin:
        return text + "🔒 Một số lệnh chỉ dành cho admin."
    return text + (
        "🛠️ <b>Admin (DM bot):</b>\n"
        "• <code>/newgiveaway</code> - Tạo giveaway bằng form\n"
        "• <code>/giveaway &lt;winners&gt;|&lt;HH:mm DD/MM/YYYY&gt;|&lt;prize&gt;|&lt;sponsor&gt;</code> - Tạo nhanh\n"
        "• <code>/proof &lt;id&gt;</code> - Xem Commit/Seed/Verify (chỉ DM)\n"
        "• <code>/announce &lt;id&gt;</code> - (Dự phòng) gửi kết quả vào nhóm\n\n"
        "🛠️ <b>Admin (Group hoặc DM):</b>\n"
        "• <code>/setgroup</code> - Set group mặc định\n"
        "• <code>/group</code> - Xem group mặc định\n"
        "• <code>/history</code> - 10 giveaway gần nhất\n"
        "• <code>/ginfo &lt;id&gt;</code> - Info + winners (Proof chỉ hiện trong DM)\n"
        "• <code>/cancel &lt;id&gt; [lý do]</code> - Hủy giveaway\n"
    )


def welcome(start_link: Optional[str]) -> str:
    return f"Welcome {start_link}".strip() if start_link else "Welcome!"


def created(giveaway: Giveaway, tz: str) -> str:
    return f"✅ Đã tạo giveaway #{giveaway.id}\n⏰ Quay lúc: {format_time(giveaway.end_time, tz)}"


NO_GROUP = "⚠️ Chưa set group. Vào group gõ /setgroup"
DELIVERY_FAILED = "❌ Bot không gửi được vào group. Hãy đảm bảo bot có quyền và đã /setgroup."
NOT_FOUND = "❌ Không tìm thấy giveaway."

# Keyed by result value
JOIN_ANSWERS = {
    "joined": "🎉 Tham gia thành công!",
    "already_joined": "❗ Bạn đã tham gia rồi",
    "not_found": "❌ Giveaway không tồn tại",
    "canceled": "⛔ Giveaway đã bị hủy",
    "closed": "⏳ Giveaway đã đóng / đã quay",
    "not_member": "❌ Bạn phải là member của group mới được tham gia",
}
JOIN_PENDING = "⏳ Giveaway đang được tạo, thử lại sau giây lát."

CANCEL_REPLIES = {
    "canceled": "✅ Đã hủy giveaway #{id}.",
    "not_found": NOT_FOUND,
    "already_canceled": "⚠️ Giveaway đã bị hủy trước đó.",
    "already_ended": "⚠️ Giveaway đã kết thúc, không thể hủy.",
}

ANNOUNCE_REPLIES = {
    "announced": "✅ Đã gửi kết quả giveaway #{id} vào nhóm.",
    "not_found": NOT_FOUND,
    "canceled": "Giveaway đã bị hủy.",
    "not_ended": "Giveaway chưa đến giờ quay hoặc chưa quay.",
    "no_winners": "Chưa có winners trong DB (có thể bot chưa quay).",
    "failed": "❌ Gửi thất bại, kết quả sẽ được gửi lại ở lượt quay kế tiếp.",
}

FORM_START = "🧾 <b>Tạo Giveaway (Form)</b>\n\nBước 1/5: Chọn <b>số người trúng</b>"
FORM_ASK_TIME = (
    "Bước 2/5: Nhập <b>thời gian quay</b> theo format:\n"
    f"<code>{GiveawayDefaults.TIME_FORMAT_HINT}</code>\n"
    "Ví dụ: <code>22:00 20/01/2026</code>\n\n"
    "Gõ /abort để hủy."
)
FORM_ASK_CUSTOM_WINNERS = "Nhập <b>số người trúng</b> (ví dụ: 7).\n\nGõ /abort để hủy."
FORM_ASK_PRIZE = "Bước 3/5: Nhập <b>phần thưởng</b>"
FORM_ASK_SPONSOR = "Bước 4/5: Nhập <b>nhà tài trợ</b> (ví dụ: @zaaraowo)"
FORM_BAD_WINNERS = (
    f"❌ Số không hợp lệ. Nhập số từ {GiveawayDefaults.MIN_WINNERS} đến {GiveawayDefaults.MAX_WINNERS}."
)
FORM_BAD_TIME = "❌ Sai format. Ví dụ: 22:00 20/01/2026"
FORM_PAST_TIME = "❌ Thời gian phải ở tương lai."
FORM_SHORT_PRIZE = "❌ Phần thưởng quá ngắn."
FORM_SHORT_SPONSOR = "❌ Nhà tài trợ quá ngắn."
FORM_ABORTED = "✅ Đã hủy form."
FORM_EXPIRED = "Form đã hết hạn."
FORM_CREATING = "⏳ Đang tạo giveaway..."
PRIVATE_ONLY = "ℹ️ Dùng {command} trong chat riêng với bot."


def form_winners_chosen(winners: int) -> str:
    return f"✅ Số người trúng: <b>{winners}</b>\n\n{FORM_ASK_TIME}"
